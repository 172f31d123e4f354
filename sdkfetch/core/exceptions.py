"""
Centralized exception hierarchy for sdkfetch.

Every failure the install pipeline can report is a subclass of
SdkFetchError. Fatal errors abort the pipeline; PruneError and
CleanupError are only ever logged.
"""

from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class SdkFetchError(Exception):
    """Base exception for all sdkfetch errors."""

    #: Pipeline stage the error was raised from (set by the orchestrator).
    stage: Optional[str] = None


class ConfigError(SdkFetchError):
    """Configuration file parsing or validation error."""

    pass


# ============================================================================
# Resolution Exceptions
# ============================================================================


class UnsupportedPlatformError(SdkFetchError):
    """Raised when no prebuilt artifact exists for the host platform."""

    def __init__(self, platform_key: str, supported: Optional[list] = None):
        self.platform_key = platform_key
        self.supported = sorted(supported or [])
        msg = f"Unsupported platform: {platform_key}"
        if self.supported:
            msg += f". Supported platforms: {', '.join(self.supported)}"
        super().__init__(msg)


class CatalogError(SdkFetchError):
    """Base exception for artifact catalog errors."""

    pass


class MissingDigestError(CatalogError):
    """Raised when a known platform has no pinned digest."""

    def __init__(self, platform_key: str, version: str):
        self.platform_key = platform_key
        self.version = version
        super().__init__(
            f"No digest pinned for {platform_key} (SDK {version}). "
            "Run 'sdkfetch digests' to refresh the catalog."
        )


# ============================================================================
# Transport Exceptions
# ============================================================================


class TransportError(SdkFetchError):
    """Raised when an artifact cannot be fetched."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        retryable: bool = False,
    ):
        self.url = url
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message)


class RedirectLimitError(TransportError):
    """Raised when a redirect chain exceeds the configured hop limit."""

    def __init__(self, url: str, max_redirects: int):
        self.max_redirects = max_redirects
        super().__init__(
            f"Too many redirects (limit {max_redirects}) while fetching {url}",
            url=url,
        )


# ============================================================================
# Integrity Exceptions
# ============================================================================


class IntegrityError(SdkFetchError):
    """Raised when a downloaded file does not match its pinned digest."""

    def __init__(self, expected: str, actual: str, path: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        self.path = path
        name = f" for {path}" if path else ""
        super().__init__(
            f"Checksum mismatch{name}: expected {expected}, got {actual}"
        )


# ============================================================================
# Filesystem Exceptions
# ============================================================================


class ExtractionError(SdkFetchError):
    """Failed to extract an archive."""

    pass


class UnsupportedArchiveFormat(ExtractionError):
    """Archive format is not supported."""

    pass


class InsecureArchiveError(ExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


class PruneError(SdkFetchError):
    """Failed to remove a non-essential subtree. Never fatal."""

    def __init__(self, message: str, removed: Optional[list] = None):
        self.removed = list(removed or [])
        super().__init__(message)


class CleanupError(SdkFetchError):
    """Failed to remove temporary files. Never fatal."""

    pass


# ============================================================================
# Locking Exceptions
# ============================================================================


class InstallLockTimeout(SdkFetchError):
    """Raised when another install holds the destination lock."""

    pass
