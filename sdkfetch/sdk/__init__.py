"""
aic-sdk artifact catalog and install pipeline.
"""

from sdkfetch.sdk.catalog import (
    ArtifactCatalog,
    ArtifactDescriptor,
    CatalogReport,
    load_catalog,
)
from sdkfetch.sdk.installer import (
    InstallOrchestrator,
    InstallResult,
    InstallState,
    install_sdk,
)
from sdkfetch.sdk.layout import InstallationStatus, check_installation

__all__ = [
    "ArtifactCatalog",
    "ArtifactDescriptor",
    "CatalogReport",
    "load_catalog",
    "InstallOrchestrator",
    "InstallResult",
    "InstallState",
    "install_sdk",
    "InstallationStatus",
    "check_installation",
]
