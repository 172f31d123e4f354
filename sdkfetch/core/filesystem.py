"""
Cross-platform file system utilities for sdkfetch.

This module provides robust, platform-aware file operations including:
- Archive extraction (tar.gz via tarfile, zip via the platform's native tool)
- Pruning of non-essential subtrees from an installed tree
- Safe file operations (atomic writes, safe deletion)
- Temporary directory management

Archive extraction is a single ArchiveExtractor capability with one concrete
strategy per archive format, selected by file extension.
"""

import logging
import os
import platform
import shutil
import subprocess
import sys
import tarfile
import tempfile
import zipfile
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, List, Optional, Union

from sdkfetch.core.exceptions import (
    CleanupError,
    ExtractionError,
    InsecureArchiveError,
    PruneError,
    UnsupportedArchiveFormat,
)
from sdkfetch.core.platform import normalize_os

logger = logging.getLogger(__name__)

# Platform detection
IS_WINDOWS = os.name == "nt"


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to (under) parent directory.

    Example:
        >>> is_relative_to(Path("/home/user/sdk/lib"), Path("/home/user"))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Prevents directory traversal attacks (e.g., paths containing '../').

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


# ============================================================================
# Archive Extraction
# ============================================================================


class ArchiveExtractor(ABC):
    """
    Unpack a verified archive into a destination directory.

    Use ArchiveExtractor.for_archive() to pick the strategy for a file.

    Example:
        >>> extractor = ArchiveExtractor.for_archive(Path("sdk.tar.gz"))
        >>> extractor.extract(Path("sdk.tar.gz"), Path("sdk"))
    """

    #: Lowercase filename suffixes handled by the strategy
    extensions: tuple = ()

    @classmethod
    def handles(cls, archive_path: Union[str, Path]) -> bool:
        """Check whether this strategy handles archive_path."""
        return Path(archive_path).name.lower().endswith(cls.extensions)

    @staticmethod
    def for_archive(
        archive_path: Union[str, Path], host_os: Optional[str] = None
    ) -> "ArchiveExtractor":
        """
        Select the extraction strategy for an archive by its extension.

        Args:
            archive_path: Archive file name or path
            host_os: Normalized host OS for tool selection (default: detected)

        Raises:
            UnsupportedArchiveFormat: If no strategy handles the extension
        """
        if TarGzExtractor.handles(archive_path):
            return TarGzExtractor()
        if ZipExtractor.handles(archive_path):
            return ZipExtractor(host_os=host_os)

        raise UnsupportedArchiveFormat(
            f"Unsupported archive format: {Path(archive_path).name}. "
            "Supported: .tar.gz, .tgz, .zip"
        )

    def extract(self, archive_path: Union[str, Path], destination: Union[str, Path]):
        """
        Extract archive_path into destination, creating it if needed.

        Raises:
            ExtractionError: If the archive is corrupt or the tool fails
            InsecureArchiveError: If the archive contains unsafe paths
        """
        archive_path = Path(archive_path)
        destination = Path(destination)

        if not archive_path.exists():
            raise ExtractionError(f"Archive not found: {archive_path}")

        destination.mkdir(parents=True, exist_ok=True)
        logger.info(f"Extracting {archive_path.name} to {destination}")

        try:
            self._extract(archive_path, destination)
        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionError(f"Failed to extract {archive_path.name}: {e}") from e

        logger.info("Extraction completed")

    @abstractmethod
    def _extract(self, archive_path: Path, destination: Path) -> None:
        """Format-specific extraction."""


class TarGzExtractor(ArchiveExtractor):
    """Extract .tar.gz archives with Python's tarfile module."""

    extensions = (".tar.gz", ".tgz")

    def _extract(self, archive_path: Path, destination: Path) -> None:
        with tarfile.open(archive_path, "r:gz") as tar:
            members = tar.getmembers()

            # Validate all paths first
            for member in members:
                _validate_archive_path(member.name, destination)

            # Extract with filter for security (Python 3.12+)
            # For older Python, we've already validated paths above
            if sys.version_info >= (3, 12):
                tar.extractall(destination, members=members, filter="data")
            else:
                tar.extractall(destination, members=members)


class ZipExtractor(ArchiveExtractor):
    """
    Extract .zip archives with the platform's native unzip tool.

    Zip archives are only published for Windows, where PowerShell's
    Expand-Archive is always present; elsewhere the `unzip` utility is used.
    """

    extensions = (".zip",)

    def __init__(self, host_os: Optional[str] = None):
        self.host_os = host_os or normalize_os(platform.system())

    def build_command(self, archive_path: Path, destination: Path) -> List[str]:
        """
        Build the extraction command line for the host.

        Raises:
            ExtractionError: If the native tool is not installed
        """
        if self.host_os == "windows":
            powershell = shutil.which("powershell") or shutil.which("pwsh")
            if not powershell:
                raise ExtractionError("Extracting .zip archives requires PowerShell")

            archive = str(archive_path).replace("'", "''")
            target = str(destination).replace("'", "''")
            return [
                powershell,
                "-NoProfile",
                "-NonInteractive",
                "-Command",
                f"Expand-Archive -LiteralPath '{archive}' "
                f"-DestinationPath '{target}' -Force",
            ]

        unzip = shutil.which("unzip")
        if not unzip:
            raise ExtractionError(
                "Extracting .zip archives requires the 'unzip' utility"
            )
        return [unzip, "-q", "-o", str(archive_path), "-d", str(destination)]

    def _extract(self, archive_path: Path, destination: Path) -> None:
        # Structural check and path validation before handing off to the tool
        try:
            with zipfile.ZipFile(archive_path, "r") as zf:
                for member in zf.namelist():
                    _validate_archive_path(member, destination)
        except zipfile.BadZipFile as e:
            raise ExtractionError(f"Invalid zip archive {archive_path.name}: {e}") from e

        cmd = self.build_command(archive_path, destination)
        logger.debug(f"Running: {' '.join(cmd)}")

        result = subprocess.run(cmd, capture_output=True, text=True)
        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip()
            raise ExtractionError(
                f"Extraction failed with code {result.returncode}"
                + (f": {detail}" if detail else "")
            )


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
    host_os: Optional[str] = None,
) -> None:
    """
    Extract an archive to a destination directory.

    Example:
        >>> extract_archive('aic-sdk-x86_64-unknown-linux-gnu.tar.gz', 'sdk')
    """
    ArchiveExtractor.for_archive(archive_path, host_os=host_os).extract(
        archive_path, destination
    )


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    If the write fails, the original file (if any) remains unchanged.
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Create temp file in same directory (ensures same filesystem)
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise


def _handle_remove_readonly(func, path, exc):
    """Error handler for Windows read-only files."""
    if not os.access(path, os.W_OK):
        os.chmod(path, 0o777)
        func(path)
    else:
        raise


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        OSError: If deletion fails

    Example:
        >>> safe_rmtree('sdk/docs', require_prefix='sdk')
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {path}")

    if not IS_WINDOWS:
        shutil.rmtree(path)
    elif sys.version_info >= (3, 12):
        shutil.rmtree(path, onexc=_handle_remove_readonly)
    else:
        shutil.rmtree(path, onerror=_handle_remove_readonly)


def prune_tree(root: Union[str, Path], names: Iterable[str]) -> List[Path]:
    """
    Remove non-essential top-level subtrees from an installed tree.

    Every name is attempted even if an earlier one fails.

    Args:
        root: Installed tree
        names: Top-level directory names to remove (e.g. 'examples', 'docs')

    Returns:
        Paths that were removed (absent names are skipped silently)

    Raises:
        PruneError: If any subtree could not be removed
    """
    root = Path(root)
    removed: List[Path] = []
    failures: List[str] = []

    for name in names:
        if not name or Path(name).name != name or name in (".", ".."):
            failures.append(f"{name!r}: not a top-level directory name")
            continue

        target = root / name
        if not target.exists():
            continue

        try:
            if target.is_dir() and not target.is_symlink():
                safe_rmtree(target, require_prefix=root)
            else:
                target.unlink()
            removed.append(target)
            logger.debug(f"Pruned {target}")
        except (OSError, ValueError) as e:
            failures.append(f"{name}: {e}")

    if failures:
        raise PruneError(
            f"Failed to prune {root}: {'; '.join(failures)}", removed=removed
        )

    return removed


def remove_path(path: Union[str, Path]) -> None:
    """
    Remove a file or directory tree if it exists.

    Raises:
        CleanupError: If removal fails
    """
    path = Path(path)
    try:
        if path.is_dir() and not path.is_symlink():
            safe_rmtree(path)
        else:
            path.unlink(missing_ok=True)
    except (OSError, ValueError) as e:
        raise CleanupError(f"Failed to remove '{path}': {e}") from e


# ============================================================================
# Temporary File/Directory Management
# ============================================================================


@contextmanager
def temporary_directory(
    prefix: str = "sdkfetch_",
    parent: Optional[Union[str, Path]] = None,
    cleanup: bool = True,
):
    """
    Context manager for temporary directory with automatic cleanup.

    Cleanup failures are logged, never raised.

    Yields:
        Path to temporary directory

    Example:
        >>> with temporary_directory() as tmp:
        ...     (tmp / 'file.txt').write_text('test')
    """
    if parent is not None:
        Path(parent).mkdir(parents=True, exist_ok=True)
    temp_dir = Path(tempfile.mkdtemp(prefix=prefix, dir=parent))

    try:
        yield temp_dir
    finally:
        if cleanup and temp_dir.exists():
            try:
                remove_path(temp_dir)
            except CleanupError as e:
                logger.warning(str(e))


__all__ = [
    # Path utilities
    "is_relative_to",
    # Archive extraction
    "ArchiveExtractor",
    "TarGzExtractor",
    "ZipExtractor",
    "extract_archive",
    # Safe file operations
    "atomic_write",
    "safe_rmtree",
    "prune_tree",
    "remove_path",
    # Temporary files
    "temporary_directory",
]
