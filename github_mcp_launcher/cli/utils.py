"""
Shared utilities for CLI commands.

Provides common functionality used across multiple CLI commands to
eliminate duplication and ensure consistent behavior.
"""

import logging
import shlex
from pathlib import Path

from github_mcp_launcher.core.exceptions import MissingCredentialError
from github_mcp_launcher.launcher.cache import VersionedBinaryCache
from github_mcp_launcher.launcher.command import Command, CommandBuilder
from github_mcp_launcher.launcher.credentials import CredentialResolver
from github_mcp_launcher.launcher.settings import Settings, load_settings
from github_mcp_launcher.release.feed import GitHubReleaseFeed

logger = logging.getLogger(__name__)

# Shell-safe, so format_command() prints it unquoted
MASK = "REDACTED"


def load_host_settings(args) -> Settings:
    """
    Build settings from the settings file and command-line overrides.

    Command-line values win over file values.

    Raises:
        SettingsParseError: If the settings file is malformed
    """
    settings_file = getattr(args, "settings", None)
    settings = load_settings(Path(settings_file)) if settings_file else Settings()

    return settings.merged(
        github_personal_access_token=getattr(args, "token", None),
        use_wrapper_script=getattr(args, "use_wrapper", None),
        use_npm_package=getattr(args, "use_npm", None),
    )


def create_builder(args, settings: Settings) -> CommandBuilder:
    """
    Create a command builder rooted at the --work-dir directory.

    The GitHub token, when one is available, is also sent to the release
    feed so API requests get the authenticated rate limit.
    """
    work_dir = Path(args.work_dir).resolve()
    logger.debug(f"Working directory: {work_dir}")

    credentials = CredentialResolver()
    try:
        api_token = credentials.resolve(settings)
    except MissingCredentialError:
        api_token = None

    cache = VersionedBinaryCache(work_dir, feed=GitHubReleaseFeed(token=api_token))
    return CommandBuilder(work_dir, cache=cache, credentials=credentials)


def mask_env(command: Command) -> Command:
    """Return a copy of command with every environment value masked."""
    return Command(
        command=command.command,
        args=list(command.args),
        env={key: MASK for key in command.env},
    )


def format_command(command: Command) -> str:
    """
    Format a command as a single shell line.

    Example:
        >>> format_command(Command("bash", ["wrappers/github-mcp-wrapper.sh"]))
        'bash wrappers/github-mcp-wrapper.sh'
    """
    parts = [f"{key}={shlex.quote(value)}" for key, value in command.env.items()]
    parts.extend(shlex.quote(part) for part in command.argv)
    return " ".join(parts)
