"""
Info command implementation.

Shows the host platform key, the pinned SDK version and the artifact this
machine would install.
"""

import logging

from sdkfetch.cli.utils import load_catalog_for
from sdkfetch.core.exceptions import CatalogError, UnsupportedPlatformError
from sdkfetch.core.platform import PlatformResolver

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the info command.

    Returns:
        Exit code (0 if this machine has an installable artifact)
    """
    catalog = load_catalog_for(args)
    resolver = PlatformResolver()

    print(f"SDK version:  {catalog.version}")
    print(f"Host:         {resolver.system} / {resolver.machine}")
    print(f"Supported:    {', '.join(catalog.platform_keys())}")

    report = catalog.validate()
    if not report.ok:
        print(f"Catalog:      {report}")

    try:
        key = resolver.resolve(catalog)
        print(f"Platform key: {key}")
        descriptor = catalog.describe(key)
    except UnsupportedPlatformError as e:
        print(f"Platform key: {e.platform_key} (unsupported)")
        return 1
    except CatalogError as e:
        print(f"Artifact:     unavailable ({e})")
        return 1

    print(f"Archive:      {descriptor.filename}")
    print(f"URL:          {descriptor.url}")
    print(f"{descriptor.algorithm.upper()}:       {descriptor.digest}")
    return 0
