"""
Concurrent access control for sdkfetch.

The install pipeline itself assumes it is the only writer of its destination
directory. Callers that may run concurrently (parallel CI jobs, two package
installs in one workspace) hold an install lock for the whole run.

Usage:
    from sdkfetch.core.locking import install_lock

    with install_lock(Path("sdk"), timeout=300):
        InstallOrchestrator(...).run()
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Union

from filelock import FileLock, Timeout

from sdkfetch.core.exceptions import InstallLockTimeout

logger = logging.getLogger(__name__)


def lock_path_for(destination: Union[str, Path]) -> Path:
    """
    Get the lock file path guarding a destination directory.

    The lock lives beside the destination, never inside it, so its presence
    cannot be mistaken for an installed tree.

    Example:
        >>> lock_path_for(Path("project/sdk"))
        PosixPath('project/sdk.lock')
    """
    destination = Path(destination)
    return destination.with_name(f"{destination.name}.lock")


@contextmanager
def install_lock(destination: Union[str, Path], timeout: float = 300):
    """
    Acquire the install lock for a destination directory.

    Args:
        destination: Directory the SDK is installed into
        timeout: Maximum wait time in seconds (0 fails immediately)

    Yields:
        Path to the lock file

    Raises:
        InstallLockTimeout: If another process holds the lock past timeout
    """
    lock_path = lock_path_for(destination)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(lock_path, timeout=timeout)

    try:
        lock.acquire()
    except Timeout:
        raise InstallLockTimeout(
            f"Could not acquire install lock {lock_path} within {timeout}s. "
            "Another install may be running."
        ) from None

    logger.debug(f"Acquired install lock: {lock_path}")
    try:
        yield lock_path
    finally:
        lock.release()
        logger.debug(f"Released install lock: {lock_path}")


__all__ = ["install_lock", "lock_path_for"]
