"""
Tests for installed SDK layout checks.
"""

from sdkfetch.sdk.layout import check_installation


class TestCheckInstallation:
    """Test check_installation."""

    def test_not_installed(self, tmp_path):
        """Test a missing destination."""
        status = check_installation(tmp_path / "sdk")

        assert not status.exists
        assert not status.complete
        assert "SDK not installed" in str(status)

    def test_incomplete(self, tmp_path):
        """Test a destination missing lib/ is incomplete."""
        destination = tmp_path / "sdk"
        (destination / "include").mkdir(parents=True)

        status = check_installation(destination)

        assert status.exists
        assert status.missing == ["lib"]
        assert "missing: lib" in str(status)

    def test_complete(self, tmp_path):
        """Test include/ and lib/ make a complete install."""
        destination = tmp_path / "sdk"
        (destination / "include").mkdir(parents=True)
        (destination / "lib").mkdir()

        status = check_installation(destination)

        assert status.complete
        assert str(status) == f"SDK installed at {destination}"
