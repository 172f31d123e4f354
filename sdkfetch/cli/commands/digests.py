"""
Digests command implementation.

Downloads catalog artifacts and pins their digests. Run after bumping the
SDK version in the catalog; only platforms without a digest are processed
unless --all is given.
"""

import logging

import yaml

from sdkfetch.cli.utils import load_installer_config, print_error, print_warning
from sdkfetch.core.download import Downloader
from sdkfetch.core.exceptions import SdkFetchError
from sdkfetch.core.filesystem import atomic_write, temporary_directory
from sdkfetch.core.verification import compute_file_hash
from sdkfetch.sdk.catalog import get_default_catalog_path, load_catalog

logger = logging.getLogger(__name__)

HEADER = (
    "# Pinned aic-sdk release artifacts.\n"
    "#\n"
    "# Archive filenames may use {version}. Download URLs are built as\n"
    "#   {base_url}/{version}/{filename}\n"
    "# Refresh digests with `sdkfetch digests` after bumping `version`.\n"
)


def run(args) -> int:
    """
    Run the digests command.

    Returns:
        Exit code (0 if every selected platform was pinned)
    """
    config = load_installer_config(args)
    catalog_path = config.catalog or get_default_catalog_path()
    output_path = getattr(args, "output", None) or catalog_path
    catalog = load_catalog(catalog_path)

    selected = list(getattr(args, "platform", None) or catalog.platform_keys())
    unknown = [key for key in selected if key not in catalog.platforms]
    if unknown:
        print_error(
            f"Unknown platform(s): {', '.join(unknown)}",
            f"Catalog platforms: {', '.join(catalog.platform_keys())}",
        )
        return 1

    if not getattr(args, "all", False):
        selected = [key for key in selected if key not in catalog.digests]

    if not selected:
        print("All selected platforms already have digests (use --all to recompute)")
        return 0

    downloader = Downloader(
        timeout=config.timeout,
        max_redirects=config.max_redirects,
        retries=config.retries,
    )

    updates = {}
    failed = []
    with temporary_directory(prefix="sdkfetch_digests_", parent=config.temp_dir) as tmp:
        for key in selected:
            filename = catalog.platforms[key]
            url = catalog.url_for(filename)
            archive_path = tmp / filename
            logger.info(f"Downloading {url}...")
            try:
                downloader.fetch(url, archive_path)
            except SdkFetchError as e:
                print_warning(f"{key}: {e}")
                failed.append(key)
                continue

            digest = compute_file_hash(archive_path, catalog.algorithm)
            archive_path.unlink()
            updates[key] = digest
            logger.info(f"  {key}: {digest}")

    if updates:
        updated = catalog.with_digests(updates)
        content = HEADER + yaml.safe_dump(updated.to_dict(), sort_keys=False)
        atomic_write(output_path, content)
        logger.info(f"Updated {len(updates)} digest(s) in {output_path}")

    if failed:
        print_error(f"Could not pin digests for: {', '.join(failed)}")
        return 1
    return 0
