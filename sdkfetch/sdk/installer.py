"""
SDK install orchestration.

This module sequences the acquisition pipeline for the prebuilt aic-sdk
archive: idempotency check, platform resolution, download, digest
verification, extraction, pruning and cleanup. It owns the pipeline state
machine and top-level error reporting; the components it drives never call
each other.

States:
    IDLE -> CHECKED -> RESOLVED -> DOWNLOADED -> VERIFIED -> EXTRACTED
         -> PRUNED -> CLEANED -> DONE
    FAILED is reachable from any state.

Known limitation: with the default (non-staged) extraction the destination is
created before extraction completes, so a failed extraction leaves a
directory that the next run treats as already installed. Pass
staged_extraction=True to unpack into a sibling directory and rename it into
place only on success, or run `sdkfetch clean` before retrying.
"""

import logging
import tempfile
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from sdkfetch.config.parser import DEFAULT_PRUNE_DIRS, InstallerConfig
from sdkfetch.core.download import Downloader, DownloadProgress
from sdkfetch.core.exceptions import (
    CatalogError,
    CleanupError,
    ExtractionError,
    PruneError,
    SdkFetchError,
    TransportError,
)
from sdkfetch.core.filesystem import ArchiveExtractor, prune_tree, remove_path
from sdkfetch.core.locking import install_lock
from sdkfetch.core.platform import PlatformResolver
from sdkfetch.core.verification import IntegrityVerifier
from sdkfetch.sdk.catalog import ArtifactCatalog, ArtifactDescriptor, load_catalog

logger = logging.getLogger(__name__)


class InstallState(Enum):
    """Pipeline states."""

    IDLE = "idle"
    CHECKED = "checked"
    RESOLVED = "resolved"
    DOWNLOADED = "downloaded"
    VERIFIED = "verified"
    EXTRACTED = "extracted"
    PRUNED = "pruned"
    CLEANED = "cleaned"
    DONE = "done"
    FAILED = "failed"


# Stage attempted when leaving each state; used to label failures
STAGE_FROM_STATE = {
    InstallState.IDLE: "check",
    InstallState.CHECKED: "resolve",
    InstallState.RESOLVED: "download",
    InstallState.DOWNLOADED: "verify",
    InstallState.VERIFIED: "extract",
    InstallState.EXTRACTED: "prune",
    InstallState.PRUNED: "cleanup",
    InstallState.CLEANED: "cleanup",
}

# Typed error wrapping an OSError raised while a stage runs
STAGE_ERRORS = {
    "resolve": CatalogError,
    "download": TransportError,
    "extract": ExtractionError,
    "prune": PruneError,
    "cleanup": CleanupError,
}


@dataclass
class InstallResult:
    """Result of an install run."""

    destination: Path
    """Directory the SDK is installed into"""

    already_installed: bool = False
    """Whether the run was a no-op because the destination existed"""

    platform_key: Optional[str] = None
    """Resolved platform key (None for a no-op run)"""

    descriptor: Optional[ArtifactDescriptor] = None
    """Artifact that was installed"""

    bytes_downloaded: int = 0
    """Archive size in bytes"""

    pruned: List[Path] = field(default_factory=list)
    """Subtrees removed after extraction"""

    warnings: List[str] = field(default_factory=list)
    """Non-fatal prune and cleanup problems"""

    states: List[InstallState] = field(default_factory=list)
    """State history of the run"""

    duration: float = 0.0
    """Wall time in seconds"""


class InstallOrchestrator:
    """
    Drive one single-shot SDK install.

    Example:
        >>> orchestrator = InstallOrchestrator(destination=Path("sdk"))
        >>> result = orchestrator.run()
        >>> if result.already_installed:
        ...     print("Nothing to do")
    """

    def __init__(
        self,
        destination: Union[str, Path],
        catalog: Optional[ArtifactCatalog] = None,
        catalog_path: Optional[Path] = None,
        resolver: Optional[PlatformResolver] = None,
        downloader: Optional[Downloader] = None,
        verifier: Optional[IntegrityVerifier] = None,
        prune: Iterable[str] = DEFAULT_PRUNE_DIRS,
        temp_dir: Optional[Path] = None,
        staged_extraction: bool = False,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
        host_os: Optional[str] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            destination: Directory to install into; its existence marks the
                SDK as installed
            catalog: Artifact catalog. If None, loaded from catalog_path (or
                the pinned catalog) when first needed
            catalog_path: Substitute catalog YAML used when catalog is None
            resolver: Host platform resolver
            downloader: Artifact downloader
            verifier: Digest verifier (default: the catalog's algorithm)
            prune: Top-level directories removed after extraction
            temp_dir: Parent of the transient download directory
                (default: system temp)
            staged_extraction: Extract into a sibling directory and rename on
                success instead of extracting in place
            progress_callback: Optional observer for download progress
            host_os: Normalized host OS for archive tool selection
        """
        self.destination = Path(destination)
        self.catalog = catalog
        self.catalog_path = catalog_path
        self.resolver = resolver or PlatformResolver()
        self.downloader = downloader or Downloader()
        self.verifier = verifier
        self.prune = tuple(prune)
        self.temp_dir = Path(temp_dir) if temp_dir else None
        self.staged_extraction = staged_extraction
        self.progress_callback = progress_callback
        self.host_os = host_os

        self.state = InstallState.IDLE
        self.history: List[InstallState] = [InstallState.IDLE]
        self.error: Optional[BaseException] = None

    @classmethod
    def from_config(
        cls, config: InstallerConfig, **kwargs
    ) -> "InstallOrchestrator":
        """Create an orchestrator from an InstallerConfig."""
        kwargs.setdefault(
            "downloader",
            Downloader(
                timeout=config.timeout,
                max_redirects=config.max_redirects,
                retries=config.retries,
            ),
        )
        return cls(
            destination=config.destination,
            catalog_path=config.catalog,
            prune=config.prune,
            temp_dir=config.temp_dir,
            staged_extraction=config.staged_extraction,
            **kwargs,
        )

    def run(self) -> InstallResult:
        """
        Run the pipeline once.

        Returns:
            InstallResult describing what was done

        Raises:
            SdkFetchError: The typed error of the failing stage, with its
                `stage` attribute set
            RuntimeError: If the orchestrator already ran
        """
        if self.state is not InstallState.IDLE:
            raise RuntimeError("InstallOrchestrator instances are single-shot")

        start_time = time.time()
        result = InstallResult(destination=self.destination)

        try:
            self._run(result)
        except OSError as e:
            error = self._wrap_os_error(e)
            self._fail(error)
            raise error from e
        except BaseException as e:
            self._fail(e)
            raise
        finally:
            result.states = list(self.history)
            result.duration = time.time() - start_time

        return result

    def _run(self, result: InstallResult):
        # Idle -> Checked
        if self.destination.exists():
            self._transition(InstallState.CHECKED)
            logger.info(f"SDK already downloaded at {self.destination}. Skipping download.")
            result.already_installed = True
            self._transition(InstallState.DONE)
            return
        self._transition(InstallState.CHECKED)

        # Checked -> Resolved
        descriptor = self._resolve()
        result.platform_key = descriptor.platform_key
        result.descriptor = descriptor
        self._transition(InstallState.RESOLVED)

        work_dir = self._make_work_dir()
        archive_path = work_dir / descriptor.filename
        try:
            # Resolved -> Downloaded
            result.bytes_downloaded = self.downloader.fetch(
                descriptor.url, archive_path, progress_callback=self.progress_callback
            )
            self._transition(InstallState.DOWNLOADED)

            # Downloaded -> Verified
            verifier = self.verifier or IntegrityVerifier(descriptor.algorithm)
            verifier.verify(archive_path, descriptor.digest)
            self._transition(InstallState.VERIFIED)

            # Verified -> Extracted
            self._extract(archive_path)
            self._transition(InstallState.EXTRACTED)

            # Extracted -> Pruned
            result.pruned = self._prune(result)
            self._transition(InstallState.PRUNED)
        finally:
            # Temp files go on both success and failure paths
            self._cleanup(archive_path, work_dir, result)

        self._transition(InstallState.CLEANED)
        logger.info("SDK installation completed successfully!")
        self._transition(InstallState.DONE)

    def _transition(self, state: InstallState):
        logger.debug(f"Install state: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def _wrap_os_error(self, error: OSError) -> SdkFetchError:
        stage = STAGE_FROM_STATE.get(self.state, self.state.value)
        wrapped = STAGE_ERRORS.get(stage, SdkFetchError)(str(error))
        wrapped.stage = stage
        return wrapped

    def _fail(self, error: BaseException):
        if isinstance(error, SdkFetchError) and error.stage is None:
            error.stage = STAGE_FROM_STATE.get(self.state, self.state.value)
        self.error = error
        self._transition(InstallState.FAILED)

    def _resolve(self) -> ArtifactDescriptor:
        if self.catalog is None:
            self.catalog = load_catalog(self.catalog_path)

        platform_key = self.resolver.resolve(self.catalog)
        descriptor = self.catalog.describe(platform_key)
        logger.info(
            f"Resolved aic-sdk {self.catalog.version} for {platform_key}: "
            f"{descriptor.filename}"
        )
        return descriptor

    def _make_work_dir(self) -> Path:
        if self.temp_dir is not None:
            self.temp_dir.mkdir(parents=True, exist_ok=True)
        work_dir = Path(tempfile.mkdtemp(prefix="sdkfetch_", dir=self.temp_dir))
        logger.debug(f"Created temp directory: {work_dir}")
        return work_dir

    def _extract(self, archive_path: Path):
        extractor = ArchiveExtractor.for_archive(archive_path, host_os=self.host_os)

        if not self.staged_extraction:
            # Destination exists from here on, even if extraction fails
            self.destination.mkdir(parents=True, exist_ok=True)
            extractor.extract(archive_path, self.destination)
            return

        self.destination.parent.mkdir(parents=True, exist_ok=True)
        staging_dir = Path(
            tempfile.mkdtemp(
                prefix=f".{self.destination.name}.",
                suffix=".staging",
                dir=self.destination.parent,
            )
        )
        try:
            extractor.extract(archive_path, staging_dir)
            staging_dir.rename(self.destination)
        except BaseException:
            try:
                remove_path(staging_dir)
            except CleanupError as e:
                logger.warning(str(e))
            raise

    def _prune(self, result: InstallResult) -> List[Path]:
        if not self.prune:
            return []

        try:
            removed = prune_tree(self.destination, self.prune)
        except PruneError as e:
            logger.warning(f"Failed to remove unnecessary directories: {e}")
            result.warnings.append(str(e))
            return e.removed

        for path in removed:
            logger.info(f"Removed unnecessary directory: {path.name}")
        return removed

    def _cleanup(self, archive_path: Path, work_dir: Path, result: InstallResult):
        for path in (archive_path, work_dir):
            try:
                remove_path(path)
            except CleanupError as e:
                logger.warning(str(e))
                result.warnings.append(str(e))


def install_sdk(
    config: Optional[InstallerConfig] = None,
    lock: bool = True,
    **kwargs,
) -> InstallResult:
    """
    Install the SDK described by config.

    Holds the install lock for the whole run unless lock=False. Extra keyword
    arguments are passed to InstallOrchestrator.

    Example:
        >>> from sdkfetch.sdk.installer import install_sdk
        >>> result = install_sdk()
        >>> print(f"Installed at: {result.destination}")
    """
    config = config or InstallerConfig()
    orchestrator = InstallOrchestrator.from_config(config, **kwargs)

    if not lock:
        return orchestrator.run()

    with install_lock(config.destination, timeout=config.lock_timeout):
        return orchestrator.run()


__all__ = [
    "InstallState",
    "InstallResult",
    "InstallOrchestrator",
    "install_sdk",
    "STAGE_FROM_STATE",
]
