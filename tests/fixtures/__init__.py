"""Test fixtures for sdkfetch tests.

Fixtures are organized by type:

- archives: In-memory SDK archives (tar.gz and zip) shaped like real releases
- catalogs: Artifact catalogs pointing at a fake release server

Import fixtures in your tests using:
    from tests.fixtures.archives import sdk_tarball
    from tests.fixtures.catalogs import sdk_catalog
"""

__all__ = [
    "archives",
    "catalogs",
]
