"""
Verify command implementation.

Checks the installed SDK is structurally complete (include/ and lib/), which
is all the native-module loader relies on.
"""

import logging

from sdkfetch.cli.utils import load_installer_config, print_error
from sdkfetch.sdk.layout import check_installation

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the verify command.

    Returns:
        Exit code (0 if the SDK is installed and complete)
    """
    config = load_installer_config(args)
    status = check_installation(config.destination)

    if status.complete:
        print(f"✓ {status}")
        return 0

    if status.exists:
        print_error(str(status), "Run 'sdkfetch clean' and then 'sdkfetch install'.")
    else:
        print_error(str(status), "Run 'sdkfetch install'.")
    return 1
