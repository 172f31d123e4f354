"""
sdkfetch CLI argument parser.

This module implements the command-line interface for sdkfetch using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from sdkfetch.core.exceptions import SdkFetchError

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("sdkfetch")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)

COMMAND_MODULES = {
    "install": "sdkfetch.cli.commands.install",
    "info": "sdkfetch.cli.commands.info",
    "verify": "sdkfetch.cli.commands.verify",
    "clean": "sdkfetch.cli.commands.clean",
    "digests": "sdkfetch.cli.commands.digests",
}


class CLI:
    """sdkfetch command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="sdkfetch",
            description="sdkfetch - install the prebuilt aic-sdk native library",
            epilog='Use "sdkfetch COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"sdkfetch {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./sdkfetch.yaml)",
        )
        parser.add_argument(
            "--project-root",
            type=Path,
            metavar="PATH",
            default=Path.cwd(),
            help="Project root directory (default: current directory)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_info_command(subparsers)
        self._add_verify_command(subparsers)
        self._add_clean_command(subparsers)
        self._add_digests_command(subparsers)

        return parser

    def _add_destination_argument(self, parser):
        parser.add_argument(
            "--dest",
            type=Path,
            metavar="PATH",
            help="SDK destination directory (default: <project-root>/sdk)",
        )

    def _add_catalog_argument(self, parser):
        parser.add_argument(
            "--catalog",
            type=Path,
            metavar="PATH",
            help="Substitute artifact catalog YAML (default: pinned catalog)",
        )

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Download and install the SDK",
            description="Download, verify and extract the prebuilt SDK for this machine",
        )
        self._add_destination_argument(parser)
        self._add_catalog_argument(parser)
        parser.add_argument(
            "--staged",
            action="store_true",
            default=None,
            help="Extract into a staging directory and rename it into place on success",
        )
        parser.add_argument(
            "--no-lock",
            action="store_true",
            help="Do not hold the install lock (caller guarantees exclusivity)",
        )
        parser.add_argument(
            "--timeout",
            type=float,
            metavar="SECONDS",
            help="Timeout per request hop (default: 30)",
        )
        parser.add_argument(
            "--max-redirects",
            type=int,
            metavar="N",
            help="Maximum redirect hops to follow (default: 5)",
        )
        parser.add_argument(
            "--retries",
            type=int,
            metavar="N",
            help="Retries for transient download failures (default: 0)",
        )
        parser.add_argument(
            "--keep",
            action="append",
            metavar="DIR",
            default=[],
            help="Keep a directory that is pruned by default (can be used multiple times)",
        )
        parser.add_argument(
            "--no-progress",
            action="store_true",
            help="Do not display download progress",
        )

    def _add_info_command(self, subparsers):
        """Add 'info' subcommand."""
        parser = subparsers.add_parser(
            "info",
            help="Show platform and artifact information",
            description="Show the host platform key and the artifact it resolves to",
        )
        self._add_catalog_argument(parser)

    def _add_verify_command(self, subparsers):
        """Add 'verify' subcommand."""
        parser = subparsers.add_parser(
            "verify",
            help="Check the installed SDK",
            description="Check the installed SDK contains include/ and lib/",
        )
        self._add_destination_argument(parser)

    def _add_clean_command(self, subparsers):
        """Add 'clean' subcommand."""
        parser = subparsers.add_parser(
            "clean",
            help="Remove the installed SDK",
            description="Remove the SDK destination so the next install starts over",
        )
        self._add_destination_argument(parser)
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be removed without removing",
        )

    def _add_digests_command(self, subparsers):
        """Add 'digests' subcommand."""
        parser = subparsers.add_parser(
            "digests",
            help="Refresh pinned artifact digests",
            description="Download catalog artifacts and record their digests",
        )
        self._add_catalog_argument(parser)
        parser.add_argument(
            "--output",
            type=Path,
            metavar="PATH",
            help="Write the updated catalog here (default: overwrite --catalog)",
        )
        parser.add_argument(
            "--all",
            action="store_true",
            help="Recompute digests that are already pinned",
        )
        parser.add_argument(
            "--platform",
            action="append",
            metavar="KEY",
            default=[],
            help="Only process this platform key (can be used multiple times)",
        )

    def parse_args(self, args: Optional[List[str]] = None) -> argparse.Namespace:
        """
        Parse command-line arguments.

        Args:
            args: Command-line arguments (default: sys.argv[1:])

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Parse arguments and run the selected command.

        Args:
            args: Command-line arguments (default: sys.argv[1:])

        Returns:
            Exit code (0 success, 1 failure, 130 interrupted)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except SdkFetchError as e:
            stage = f" during {e.stage}" if e.stage else ""
            logger.error(f"Failed{stage}: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        module_name = COMMAND_MODULES.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
