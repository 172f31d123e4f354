"""
Tests for install command.
"""

from unittest.mock import patch

import pytest
import responses
import yaml

from sdkfetch.cli.commands import install
from sdkfetch.cli.parser import CLI


@pytest.fixture
def linux_host():
    with patch("sdkfetch.core.platform.platform.system", return_value="Linux"), patch(
        "sdkfetch.core.platform.platform.machine", return_value="x86_64"
    ):
        yield


@pytest.fixture
def catalog_file(tmp_path, sdk_catalog):
    path = tmp_path / "catalog.yaml"
    path.write_text(yaml.safe_dump(sdk_catalog.to_dict()))
    return path


def install_args(tmp_path, catalog_file, *extra):
    return CLI().parse_args(
        [
            "--project-root",
            str(tmp_path),
            "install",
            "--catalog",
            str(catalog_file),
            "--no-progress",
            *extra,
        ]
    )


class TestInstallCommand:
    """Test install command functionality."""

    @responses.activate
    def test_install(self, tmp_path, catalog_file, sdk_tarball, linux_x64_url, linux_host, capsys):
        """Test a fresh install prints a summary and returns 0."""
        responses.add(responses.GET, linux_x64_url, body=sdk_tarball, status=200)

        result = install.run(install_args(tmp_path, catalog_file))

        assert result == 0
        destination = tmp_path.resolve() / "sdk"
        assert sorted(p.name for p in destination.iterdir()) == ["include", "lib"]
        out = capsys.readouterr().out
        assert "SDK installed successfully!" in out
        assert "Platform: linux-x64" in out

    @responses.activate
    def test_keep_option(self, tmp_path, catalog_file, sdk_tarball, linux_x64_url, linux_host):
        """Test --keep preserves a directory that is pruned by default."""
        responses.add(responses.GET, linux_x64_url, body=sdk_tarball, status=200)

        install.run(install_args(tmp_path, catalog_file, "--keep", "docs"))

        destination = tmp_path.resolve() / "sdk"
        assert sorted(p.name for p in destination.iterdir()) == ["docs", "include", "lib"]

    @responses.activate
    def test_already_installed(self, tmp_path, catalog_file, linux_host, capsys):
        """Test an existing destination is a silent success."""
        (tmp_path / "sdk").mkdir()

        result = install.run(install_args(tmp_path, catalog_file))

        assert result == 0
        assert len(responses.calls) == 0
        assert capsys.readouterr().out == ""

    @responses.activate
    def test_progress_printed_to_stderr(
        self, tmp_path, catalog_file, sdk_tarball, linux_x64_url, linux_host, capsys
    ):
        """Test progress goes to stderr when enabled."""
        responses.add(responses.GET, linux_x64_url, body=sdk_tarball, status=200)
        args = CLI().parse_args(
            ["--project-root", str(tmp_path), "install", "--catalog", str(catalog_file)]
        )

        install.run(args)

        assert "Downloading:" in capsys.readouterr().err

    @responses.activate
    def test_failure_through_cli(self, tmp_path, catalog_file, linux_x64_url, linux_host, capsys):
        """Test a failed install exits 1 and names the failing stage."""
        responses.add(responses.GET, linux_x64_url, status=404)

        result = CLI().run(
            [
                "--project-root",
                str(tmp_path),
                "install",
                "--catalog",
                str(catalog_file),
                "--no-progress",
            ]
        )

        assert result == 1
        assert "Failed during download" in capsys.readouterr().err
        assert not (tmp_path / "sdk").exists()

    @responses.activate
    def test_filesystem_error_through_cli(
        self, tmp_path, catalog_file, sdk_tarball, linux_x64_url, linux_host, capsys
    ):
        """Test an OS-level failure still names the failing stage."""
        responses.add(responses.GET, linux_x64_url, body=sdk_tarball, status=200)
        (tmp_path / "vendor").write_text("regular file")

        result = CLI().run(
            [
                "--project-root",
                str(tmp_path),
                "install",
                "--catalog",
                str(catalog_file),
                "--dest",
                "vendor/sdk",
                "--no-lock",
                "--no-progress",
            ]
        )

        assert result == 1
        assert "Failed during extract:" in capsys.readouterr().err

    def test_unsupported_platform_through_cli(self, tmp_path, catalog_file, capsys):
        """Test an unsupported host exits 1 and lists supported platforms."""
        with patch("sdkfetch.core.platform.platform.system", return_value="Linux"), patch(
            "sdkfetch.core.platform.platform.machine", return_value="s390x"
        ):
            result = CLI().run(
                ["--project-root", str(tmp_path), "install", "--catalog", str(catalog_file)]
            )

        assert result == 1
        err = capsys.readouterr().err
        assert "Unsupported platform: linux-s390x" in err
        assert "linux-x64" in err
