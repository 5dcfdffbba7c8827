"""
Resolve command implementation.

Prints the command that would start the GitHub MCP server, downloading the
release binary first if it is not cached yet.
"""

import json
import logging

from github_mcp_launcher.cli.utils import (
    create_builder,
    format_command,
    load_host_settings,
    mask_env,
)
from github_mcp_launcher.core.platform import detect_platform

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the resolve command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    settings = load_host_settings(args)
    command = create_builder(args, settings).build(settings, detect_platform())

    if not args.show_token:
        command = mask_env(command)

    if args.json:
        print(json.dumps(command.to_dict(), indent=2))
    else:
        print(format_command(command))

    return 0
