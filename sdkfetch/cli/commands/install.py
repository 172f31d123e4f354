"""
Install command implementation.

Downloads, verifies and extracts the prebuilt SDK for this machine. This is
what package postinstall hooks run.
"""

import logging

from sdkfetch.cli.utils import (
    ProgressPrinter,
    format_success_message,
    load_installer_config,
    print_warning,
)
from sdkfetch.sdk.installer import install_sdk

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success or already installed)
    """
    config = load_installer_config(args)
    logger.debug(f"Arguments: {args}")

    progress = None
    if not getattr(args, "no_progress", False) and not getattr(args, "quiet", False):
        progress = ProgressPrinter()

    try:
        result = install_sdk(
            config,
            lock=not getattr(args, "no_lock", False),
            progress_callback=progress,
        )
    finally:
        if progress is not None:
            progress.finish()

    if result.already_installed:
        return 0

    for warning in result.warnings:
        print_warning(warning)

    descriptor = result.descriptor
    if not getattr(args, "quiet", False):
        print(
            format_success_message(
                "SDK installed successfully!",
                {
                    "Platform": result.platform_key,
                    "Archive": descriptor.filename,
                    "Size": f"{result.bytes_downloaded} bytes",
                    "Location": result.destination,
                    "Duration": f"{result.duration:.1f}s",
                },
            )
        )
    return 0
