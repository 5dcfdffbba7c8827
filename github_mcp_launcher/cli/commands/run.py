"""
Run command implementation.

Resolves the server command and launches it with the caller's stdin, stdout
and stderr so the server can speak its protocol over stdio.
"""

import logging
import os
import subprocess

from github_mcp_launcher.cli.utils import create_builder, load_host_settings
from github_mcp_launcher.core.exceptions import LauncherError
from github_mcp_launcher.core.platform import detect_platform

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the server.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code of the server process
    """
    settings = load_host_settings(args)
    command = create_builder(args, settings).build(settings, detect_platform())

    env = dict(os.environ)
    env.update(command.env)

    logger.info(f"Starting server: {command.command}")
    logger.debug(f"Arguments: {command.args}")

    try:
        result = subprocess.run(command.argv, env=env)
    except OSError as e:
        raise LauncherError(f"Failed to start {command.command}: {e}") from e

    return result.returncode
