"""
Integration tests against the real release server.

Run with: pytest --integration
"""

import pytest
import requests

from sdkfetch.sdk.catalog import load_catalog

pytestmark = pytest.mark.integration


@pytest.mark.parametrize("platform_key", load_catalog().platform_keys())
def test_pinned_artifact_is_published(platform_key):
    """Test every pinned archive URL resolves on the release server."""
    catalog = load_catalog()
    url = catalog.url_for(catalog.platforms[platform_key])

    response = requests.head(url, allow_redirects=True, timeout=30)

    assert response.status_code == 200, f"{url} returned {response.status_code}"
