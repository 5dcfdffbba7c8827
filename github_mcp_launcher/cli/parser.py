"""
github-mcp-launcher CLI argument parser.

This module implements the command-line interface using argparse. The CLI
plays the part of the host application: it gathers settings, asks the
launcher for a command, and prints or runs it.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from github_mcp_launcher import __version__
from github_mcp_launcher.core.exceptions import LauncherError

logger = logging.getLogger(__name__)


class CLI:
    """github-mcp-launcher command-line interface."""

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
            prog="github-mcp-launcher",
            description="Resolve, fetch, cache and launch the GitHub MCP server",
            epilog='Use "github-mcp-launcher COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version",
            action="version",
            version=f"github-mcp-launcher {__version__}",
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
            "--work-dir",
            type=Path,
            metavar="PATH",
            default=Path.cwd(),
            help="Directory holding cached versions and wrappers/ (default: current directory)",
        )
        parser.add_argument(
            "--settings",
            type=Path,
            metavar="PATH",
            help="YAML or JSON file with context server settings",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_resolve_command(subparsers)
        self._add_run_command(subparsers)
        self._add_doctor_command(subparsers)

        return parser

    def _add_settings_overrides(self, parser: argparse.ArgumentParser):
        """Add flags that override values from the settings file."""
        parser.add_argument(
            "--token",
            metavar="TOKEN",
            help="GitHub personal access token (overrides settings and environment)",
        )
        strategy = parser.add_mutually_exclusive_group()
        strategy.add_argument(
            "--use-wrapper",
            action="store_true",
            default=None,
            help="Launch a script from wrappers/ instead of the release binary",
        )
        strategy.add_argument(
            "--use-npm",
            action="store_true",
            default=None,
            help="Launch the globally installed npm server package",
        )

    def _add_resolve_command(self, subparsers):
        """Add 'resolve' subcommand."""
        parser = subparsers.add_parser(
            "resolve",
            help="Print the server command",
            description="Resolve (downloading if needed) and print the server command",
        )
        self._add_settings_overrides(parser)
        parser.add_argument(
            "--json", action="store_true", help="Print the command as JSON"
        )
        parser.add_argument(
            "--show-token",
            action="store_true",
            help="Print the token instead of masking it",
        )

    def _add_run_command(self, subparsers):
        """Add 'run' subcommand."""
        parser = subparsers.add_parser(
            "run",
            help="Resolve and launch the server",
            description="Resolve the server command and run it over stdio",
        )
        self._add_settings_overrides(parser)

    def _add_doctor_command(self, subparsers):
        """Add 'doctor' subcommand."""
        parser = subparsers.add_parser(
            "doctor",
            help="Diagnose launcher environment",
            description="Report platform, credentials, wrappers and cached versions",
        )
        parser.add_argument(
            "--token",
            metavar="TOKEN",
            help="GitHub personal access token to check",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
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
        except LauncherError as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Logs go to stderr; stdout is reserved for the server protocol.
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
            stream=sys.stderr,
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
        command_map = {
            "resolve": "github_mcp_launcher.cli.commands.resolve",
            "run": "github_mcp_launcher.cli.commands.run",
            "doctor": "github_mcp_launcher.cli.commands.doctor",
        }

        module = importlib.import_module(command_map[args.command])
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
