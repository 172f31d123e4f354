"""
Clean command implementation.

Removes the SDK destination directory. An interrupted or failed extraction
can leave a destination that the installer treats as already installed;
cleaning lets the next install start over.
"""

import logging

from sdkfetch.cli.utils import load_installer_config
from sdkfetch.core.filesystem import safe_rmtree
from sdkfetch.core.locking import install_lock

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the clean command.

    Returns:
        Exit code (0 for success, also when nothing was installed)
    """
    config = load_installer_config(args)
    destination = config.destination

    if not destination.exists():
        print(f"Nothing to remove: {destination}")
        return 0

    if getattr(args, "dry_run", False):
        print(f"Would remove: {destination}")
        return 0

    with install_lock(destination, timeout=config.lock_timeout):
        safe_rmtree(destination, require_prefix=destination.parent)

    logger.info(f"Removed {destination}")
    return 0
