"""
Shared utilities for CLI commands.

Provides common functionality used across multiple CLI commands to
eliminate duplication and ensure consistent behavior.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from sdkfetch.config.parser import InstallerConfig, load_config
from sdkfetch.core.download import DownloadProgress, format_progress
from sdkfetch.sdk.catalog import ArtifactCatalog, load_catalog

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Management
# ============================================================================


def get_project_root(args) -> Path:
    """Get the project root from parsed arguments."""
    return Path(getattr(args, "project_root", None) or Path.cwd()).resolve()


def _absolute(path: Optional[Path], root: Path) -> Optional[Path]:
    if path is None:
        return None
    path = Path(path)
    return path if path.is_absolute() else root / path


def load_installer_config(args) -> InstallerConfig:
    """
    Load sdkfetch.yaml and apply command-line overrides.

    Args:
        args: Parsed arguments (config, project_root and per-command options)

    Returns:
        Effective configuration

    Raises:
        ConfigError: If the configuration file is invalid
    """
    root = get_project_root(args)
    config = load_config(getattr(args, "config", None), project_root=root)

    prune = config.prune
    keep = getattr(args, "keep", None) or []
    if keep:
        prune = tuple(name for name in prune if name not in keep)

    config = config.override(
        destination=_absolute(getattr(args, "dest", None), root),
        catalog=_absolute(getattr(args, "catalog", None), root),
        staged_extraction=getattr(args, "staged", None),
        timeout=getattr(args, "timeout", None),
        max_redirects=getattr(args, "max_redirects", None),
        retries=getattr(args, "retries", None),
        prune=prune,
    )
    logger.debug(f"Effective configuration: {config}")
    return config


def load_catalog_for(args) -> ArtifactCatalog:
    """Load the catalog named by --catalog or the config file, else the pinned one."""
    config = load_installer_config(args)
    return load_catalog(config.catalog)


# ============================================================================
# Output Helpers
# ============================================================================


class ProgressPrinter:
    """Render download progress on a single terminal line."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stderr
        self.updates = 0

    def __call__(self, progress: DownloadProgress):
        self.updates += 1
        self.stream.write(f"\rDownloading: {format_progress(progress)}   ")
        self.stream.flush()

    def finish(self):
        """Terminate the progress line if anything was printed."""
        if self.updates:
            self.stream.write("\n")
            self.stream.flush()


def format_success_message(
    title: str,
    details: Dict[str, Any],
    next_steps: Optional[list] = None,
    width: int = 70,
) -> str:
    """
    Format a standardized success message.

    Args:
        title: Success message title
        details: Key-value pairs to display
        next_steps: Optional list of next step instructions
        width: Width of message box

    Returns:
        Formatted message string
    """
    lines = ["=" * width, title, "=" * width, ""]

    for key, value in details.items():
        lines.append(f"{key}: {value}")

    if next_steps:
        lines.append("")
        lines.append("Next steps:")
        for step in next_steps:
            lines.append(f"  {step}")

    lines.append("")
    return "\n".join(lines)


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def print_warning(message: str):
    """Print warning message to stderr."""
    print(f"WARNING: {message}", file=sys.stderr)
