"""
Core functionality for sdkfetch.

This package contains the pipeline components the installer drives:
platform resolution, downloading, verification, extraction and locking.
"""

from .exceptions import (
    SdkFetchError,
    ConfigError,
    UnsupportedPlatformError,
    CatalogError,
    MissingDigestError,
    TransportError,
    RedirectLimitError,
    IntegrityError,
    ExtractionError,
    UnsupportedArchiveFormat,
    InsecureArchiveError,
    PruneError,
    CleanupError,
    InstallLockTimeout,
)

from .platform import (
    PlatformKey,
    PlatformResolver,
    detect_platform_key,
    clear_platform_cache,
)

from .download import (
    Downloader,
    DownloadProgress,
    DownloadSession,
    download_file,
    format_progress,
)

from .verification import (
    IntegrityVerifier,
    compute_file_hash,
    verify_file_hash,
)

from .filesystem import (
    ArchiveExtractor,
    TarGzExtractor,
    ZipExtractor,
    extract_archive,
    prune_tree,
)

from .locking import install_lock

__all__ = [
    "SdkFetchError",
    "ConfigError",
    "UnsupportedPlatformError",
    "CatalogError",
    "MissingDigestError",
    "TransportError",
    "RedirectLimitError",
    "IntegrityError",
    "ExtractionError",
    "UnsupportedArchiveFormat",
    "InsecureArchiveError",
    "PruneError",
    "CleanupError",
    "InstallLockTimeout",
    "PlatformKey",
    "PlatformResolver",
    "detect_platform_key",
    "clear_platform_cache",
    "Downloader",
    "DownloadProgress",
    "DownloadSession",
    "download_file",
    "format_progress",
    "IntegrityVerifier",
    "compute_file_hash",
    "verify_file_hash",
    "ArchiveExtractor",
    "TarGzExtractor",
    "ZipExtractor",
    "extract_archive",
    "prune_tree",
    "install_lock",
]
