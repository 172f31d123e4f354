"""
Pinned artifact catalog for the aic-sdk native library.

This module provides the version-scoped table mapping a platform key to the
archive filename, download URL and expected digest of the prebuilt SDK. The
catalog is an immutable value injected into the installer; the pinned copy
ships as package data in sdkfetch/data/catalog.yaml.

Platform coverage and digest coverage are validated independently: a
platform with no catalog entry is unsupported, while a known platform with no
digest is a configuration error.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from sdkfetch.core.exceptions import (
    CatalogError,
    MissingDigestError,
    UnsupportedPlatformError,
)
from sdkfetch.core.verification import SUPPORTED_ALGORITHMS, is_valid_hash_format

logger = logging.getLogger(__name__)

# Values treated as "no digest pinned yet"
PLACEHOLDER_DIGESTS = ("", "null", "none", "tbd", "placeholder")


@dataclass(frozen=True)
class ArtifactDescriptor:
    """Everything needed to fetch and verify one platform's archive."""

    platform_key: str
    """Platform key (e.g. 'linux-x64')"""

    filename: str
    """Archive filename on the release server"""

    url: str
    """Download URL: {base_url}/{version}/{filename}"""

    digest: str
    """Expected lowercase hex digest of the archive"""

    algorithm: str = "sha256"
    """Digest algorithm"""


@dataclass(frozen=True)
class CatalogReport:
    """Result of ArtifactCatalog.validate()."""

    missing_digests: tuple = ()
    orphan_digests: tuple = ()
    invalid_digests: tuple = ()

    @property
    def ok(self) -> bool:
        return not (self.missing_digests or self.orphan_digests or self.invalid_digests)

    def __str__(self) -> str:
        if self.ok:
            return "Catalog is complete"
        problems = []
        if self.missing_digests:
            problems.append(f"no digest for: {', '.join(self.missing_digests)}")
        if self.orphan_digests:
            problems.append(
                f"digest without platform: {', '.join(self.orphan_digests)}"
            )
        if self.invalid_digests:
            problems.append(f"malformed digest for: {', '.join(self.invalid_digests)}")
        return "; ".join(problems)


def _is_placeholder(value: Any) -> bool:
    return value is None or str(value).strip().lower() in PLACEHOLDER_DIGESTS


class ArtifactCatalog:
    """
    Read-only platform -> artifact table for one pinned SDK version.

    Example:
        >>> catalog = load_catalog()
        >>> descriptor = catalog.describe("linux-x64")
        >>> print(descriptor.url)
        https://github.com/ai-coustics/aic-sdk-c/releases/download/0.6.3/...
    """

    def __init__(
        self,
        version: str,
        base_url: str,
        platforms: Mapping[str, str],
        digests: Optional[Mapping[str, Optional[str]]] = None,
        algorithm: str = "sha256",
    ):
        """
        Initialize catalog.

        Args:
            version: Pinned SDK version
            base_url: Release base URL (without version)
            platforms: Platform key -> archive filename ({version} allowed)
            digests: Platform key -> hex digest (None / placeholder = missing)
            algorithm: Digest algorithm

        Raises:
            CatalogError: If version, base URL, platforms or algorithm are invalid
        """
        if not version:
            raise CatalogError("Catalog version cannot be empty")
        if not base_url:
            raise CatalogError("Catalog base_url cannot be empty")
        if not platforms:
            raise CatalogError("Catalog must define at least one platform")
        if algorithm.lower() not in SUPPORTED_ALGORITHMS:
            raise CatalogError(f"Unsupported digest algorithm: {algorithm}")

        try:
            resolved = {
                str(key): str(filename).format(version=version)
                for key, filename in platforms.items()
            }
        except (KeyError, IndexError, ValueError) as e:
            raise CatalogError(f"Invalid filename template in catalog: {e}") from e

        self.version = str(version)
        self.base_url = base_url.rstrip("/")
        self.algorithm = algorithm.lower()
        self._platforms = MappingProxyType(resolved)
        self._digests = MappingProxyType(
            {
                str(key): str(value).strip().lower()
                for key, value in (digests or {}).items()
                if not _is_placeholder(value)
            }
        )

    @property
    def platforms(self) -> Mapping[str, str]:
        """Platform key -> resolved archive filename (read-only)."""
        return self._platforms

    @property
    def digests(self) -> Mapping[str, str]:
        """Platform key -> pinned digest (read-only)."""
        return self._digests

    def platform_keys(self) -> List[str]:
        """Sorted list of supported platform keys."""
        return sorted(self._platforms)

    def url_for(self, filename: str) -> str:
        """Build the download URL for a filename of the pinned version."""
        return f"{self.base_url}/{self.version}/{filename}"

    def describe(self, platform_key: Union[str, Any]) -> ArtifactDescriptor:
        """
        Build the artifact descriptor for a platform.

        Args:
            platform_key: PlatformKey or its string form

        Raises:
            UnsupportedPlatformError: If the platform is not in the catalog
            MissingDigestError: If the platform has no pinned digest
            CatalogError: If the pinned digest is malformed
        """
        key = str(platform_key)
        filename = self._platforms.get(key)
        if filename is None:
            raise UnsupportedPlatformError(key, self.platform_keys())

        digest = self._digests.get(key)
        if digest is None:
            raise MissingDigestError(key, self.version)

        if not is_valid_hash_format(digest, self.algorithm):
            raise CatalogError(
                f"Malformed {self.algorithm} digest for {key}: {digest!r}"
            )

        return ArtifactDescriptor(
            platform_key=key,
            filename=filename,
            url=self.url_for(filename),
            digest=digest,
            algorithm=self.algorithm,
        )

    def validate(self) -> CatalogReport:
        """Check platform and digest coverage independently."""
        keys = set(self._platforms)
        digest_keys = set(self._digests)
        return CatalogReport(
            missing_digests=tuple(sorted(keys - digest_keys)),
            orphan_digests=tuple(sorted(digest_keys - keys)),
            invalid_digests=tuple(
                sorted(
                    key
                    for key, value in self._digests.items()
                    if not is_valid_hash_format(value, self.algorithm)
                )
            ),
        )

    def with_digests(self, updates: Mapping[str, str]) -> "ArtifactCatalog":
        """Return a new catalog with some digests replaced."""
        digests: Dict[str, Optional[str]] = dict(self._digests)
        digests.update(updates)
        return ArtifactCatalog(
            version=self.version,
            base_url=self.base_url,
            platforms=self._platforms,
            digests=digests,
            algorithm=self.algorithm,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the catalog.yaml structure."""
        return {
            "version": self.version,
            "base_url": self.base_url,
            "algorithm": self.algorithm,
            "platforms": dict(self._platforms),
            "digests": {key: self._digests.get(key) for key in self.platform_keys()},
        }

    @classmethod
    def from_dict(cls, data: Any, source: str = "<dict>") -> "ArtifactCatalog":
        """
        Build a catalog from parsed YAML data.

        Raises:
            CatalogError: If required keys are missing or malformed
        """
        if not isinstance(data, dict):
            raise CatalogError(f"Catalog must be a mapping: {source}")

        missing = [k for k in ("version", "base_url", "platforms") if k not in data]
        if missing:
            raise CatalogError(
                f"Catalog {source} is missing required keys: {', '.join(missing)}"
            )

        platforms = data["platforms"]
        digests = data.get("digests") or {}
        if not isinstance(platforms, dict) or not isinstance(digests, dict):
            raise CatalogError(
                f"Catalog {source}: 'platforms' and 'digests' must be mappings"
            )

        return cls(
            version=str(data["version"]),
            base_url=str(data["base_url"]),
            platforms=platforms,
            digests=digests,
            algorithm=str(data.get("algorithm", "sha256")),
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "ArtifactCatalog":
        """
        Load a catalog from a YAML file.

        Raises:
            CatalogError: If the file is missing or invalid
        """
        path = Path(path)
        if not path.exists():
            raise CatalogError(f"Catalog file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise CatalogError(f"Invalid YAML in catalog {path}: {e}") from e

        catalog = cls.from_dict(data, source=str(path))
        logger.debug(
            f"Loaded catalog {path}: SDK {catalog.version}, "
            f"{len(catalog.platforms)} platforms"
        )
        return catalog

    def __repr__(self) -> str:
        return (
            f"ArtifactCatalog(version={self.version!r}, "
            f"platforms={self.platform_keys()!r})"
        )


def get_default_catalog_path() -> Path:
    """Get path to the pinned catalog shipped with the package."""
    # Path relative to this module: ../data/catalog.yaml
    return Path(__file__).parent.parent / "data" / "catalog.yaml"


def load_catalog(path: Optional[Union[str, Path]] = None) -> ArtifactCatalog:
    """
    Load the artifact catalog.

    Args:
        path: Substitute catalog YAML. If None, uses the pinned catalog.
    """
    return ArtifactCatalog.from_yaml(path or get_default_catalog_path())


__all__ = [
    "ArtifactCatalog",
    "ArtifactDescriptor",
    "CatalogReport",
    "get_default_catalog_path",
    "load_catalog",
]
