"""
Platform detection for sdkfetch.

This module maps the running machine's operating system and CPU architecture
to the canonical platform key used to select a prebuilt SDK archive.

Features:
- Operating system detection (Windows, Linux, macOS)
- CPU architecture normalization (x64, ARM64, x86, ARM)
- Canonical platform key generation (e.g., 'linux-x64', 'macos-arm64')
- Resolution against an artifact catalog before any network activity

Usage:
    from sdkfetch.core.platform import PlatformResolver

    resolver = PlatformResolver()
    key = resolver.resolve(catalog)
    print(f"Platform key: {key}")
"""

import functools
import logging
import platform
from dataclasses import dataclass
from typing import Optional

from sdkfetch.core.exceptions import UnsupportedPlatformError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlatformKey:
    """
    Operating system and CPU architecture pair.

    Attributes:
        os: Operating system ('windows', 'linux', 'macos')
        arch: CPU architecture ('x64', 'arm64', 'x86', 'arm')
    """

    os: str
    arch: str

    @classmethod
    def parse(cls, value: str) -> "PlatformKey":
        """
        Parse a platform key string.

        Example:
            >>> PlatformKey.parse("linux-x64")
            PlatformKey(os='linux', arch='x64')
        """
        os_name, sep, arch = value.partition("-")
        if not sep or not os_name or not arch:
            raise ValueError(f"Invalid platform key: {value!r}")
        return cls(os=os_name, arch=arch)

    def __str__(self) -> str:
        return f"{self.os}-{self.arch}"


def normalize_os(system: str) -> Optional[str]:
    """
    Normalize an OS name as reported by platform.system().

    Returns:
        'windows', 'linux', 'macos', or None if unknown
    """
    system = system.lower()

    if system == "windows" or system.startswith(("cygwin", "msys", "mingw")):
        return "windows"
    elif system == "linux":
        return "linux"
    elif system == "darwin":
        return "macos"
    return None


def normalize_architecture(machine: str) -> str:
    """
    Normalize a CPU architecture as reported by platform.machine().

    Returns:
        Normalized architecture: 'x64', 'arm64', 'x86', 'arm', or the
        lowercased original for unknown machines
    """
    machine = machine.lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64", "armv8", "armv8l"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    return machine


class PlatformResolver:
    """
    Resolve the host platform against an artifact catalog.

    The host values are read from the runtime environment by default; tests
    inject them to simulate other machines.

    Example:
        >>> resolver = PlatformResolver(system="Linux", machine="x86_64")
        >>> str(resolver.platform_key())
        'linux-x64'
    """

    def __init__(self, system: Optional[str] = None, machine: Optional[str] = None):
        self.system = system if system is not None else platform.system()
        self.machine = machine if machine is not None else platform.machine()

    def platform_key(self) -> PlatformKey:
        """
        Compute the canonical platform key for the host.

        Raises:
            UnsupportedPlatformError: If the operating system is not recognized
        """
        os_name = normalize_os(self.system)
        arch = normalize_architecture(self.machine)
        if os_name is None:
            raise UnsupportedPlatformError(f"{self.system.lower()}-{arch}")
        return PlatformKey(os=os_name, arch=arch)

    def resolve(self, catalog) -> PlatformKey:
        """
        Compute the platform key and check the catalog covers it.

        Args:
            catalog: ArtifactCatalog to check against

        Returns:
            PlatformKey present in the catalog

        Raises:
            UnsupportedPlatformError: If the catalog has no entry for the host
        """
        try:
            key = self.platform_key()
        except UnsupportedPlatformError as e:
            raise UnsupportedPlatformError(
                e.platform_key, catalog.platform_keys()
            ) from None

        if str(key) not in catalog.platforms:
            raise UnsupportedPlatformError(str(key), catalog.platform_keys())

        logger.debug(f"Resolved host platform {self.system}/{self.machine} -> {key}")
        return key


@functools.lru_cache(maxsize=1)
def detect_platform_key() -> PlatformKey:
    """
    Detect the host platform key.

    This function is cached - it only runs detection once per process.
    """
    return PlatformResolver().platform_key()


def clear_platform_cache():
    """Clear the platform detection cache."""
    detect_platform_key.cache_clear()


__all__ = [
    "PlatformKey",
    "PlatformResolver",
    "normalize_os",
    "normalize_architecture",
    "detect_platform_key",
    "clear_platform_cache",
]
