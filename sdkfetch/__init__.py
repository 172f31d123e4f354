"""
sdkfetch - install-time acquisition of the prebuilt aic-sdk native library.

Resolves the host platform, downloads the pinned SDK archive, verifies its
digest and unpacks it where the native bindings expect to find it.
"""

from sdkfetch.sdk.installer import InstallOrchestrator, InstallResult, install_sdk

__all__ = ["InstallOrchestrator", "InstallResult", "install_sdk"]
