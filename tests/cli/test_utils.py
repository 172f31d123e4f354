"""
Tests for CLI utilities.
"""

import io
from pathlib import Path

from sdkfetch.cli.parser import CLI
from sdkfetch.cli.utils import (
    ProgressPrinter,
    format_success_message,
    load_installer_config,
    print_error,
    print_warning,
)
from sdkfetch.core.download import DownloadProgress


class TestLoadInstallerConfig:
    """Test load_installer_config."""

    def test_defaults_under_project_root(self, tmp_path):
        """Test the default destination is <project-root>/sdk."""
        args = CLI().parse_args(["--project-root", str(tmp_path), "install"])

        config = load_installer_config(args)

        assert config.destination == tmp_path.resolve() / "sdk"

    def test_command_line_overrides(self, tmp_path):
        """Test options override the configuration file."""
        (tmp_path / "sdkfetch.yaml").write_text(
            "install:\n  destination: native\ndownload:\n  retries: 1\n"
        )
        args = CLI().parse_args(
            [
                "--project-root",
                str(tmp_path),
                "install",
                "--dest",
                "other",
                "--retries",
                "4",
                "--keep",
                "docs",
            ]
        )

        config = load_installer_config(args)

        root = tmp_path.resolve()
        assert config.destination == root / "other"
        assert config.retries == 4
        assert config.prune == ("examples",)

    def test_absolute_dest_kept(self, tmp_path):
        """Test absolute --dest values are used as given."""
        dest = tmp_path / "abs" / "sdk"
        args = CLI().parse_args(
            ["--project-root", str(tmp_path), "verify", "--dest", str(dest)]
        )

        assert load_installer_config(args).destination == dest

    def test_config_file_values_kept(self, tmp_path):
        """Test values without a command-line option come from the file."""
        (tmp_path / "sdkfetch.yaml").write_text("install:\n  staged_extraction: true\n")
        args = CLI().parse_args(["--project-root", str(tmp_path), "install"])

        assert load_installer_config(args).staged_extraction is True


class TestOutputHelpers:
    """Test output helpers."""

    def test_progress_printer(self):
        """Test progress renders on one line and finish ends it."""
        stream = io.StringIO()
        printer = ProgressPrinter(stream)

        printer(DownloadProgress(1048576, 2097152, 50.0, 1048576, 1))
        printer.finish()

        output = stream.getvalue()
        assert output.startswith("\rDownloading: 1.0/2.0 MB (50.0%)")
        assert output.endswith("\n")

    def test_progress_printer_silent_finish(self):
        """Test finish prints nothing when there was no progress."""
        stream = io.StringIO()
        ProgressPrinter(stream).finish()
        assert stream.getvalue() == ""

    def test_format_success_message(self):
        """Test success message layout."""
        message = format_success_message(
            "Done", {"Location": Path("sdk")}, next_steps=["sdkfetch verify"], width=10
        )

        assert message.splitlines()[:3] == ["=" * 10, "Done", "=" * 10]
        assert "Location: sdk" in message
        assert "  sdkfetch verify" in message

    def test_print_error_and_warning(self, capsys):
        """Test errors and warnings go to stderr."""
        print_error("broken", "try again")
        print_warning("careful")

        err = capsys.readouterr().err
        assert "ERROR: broken\n  try again\n" in err
        assert "WARNING: careful" in err
