"""
github-mcp-launcher: resolve, fetch, cache and launch the GitHub MCP server.
"""

__version__ = "0.1.0"

from github_mcp_launcher.core.platform import Platform, detect_platform
from github_mcp_launcher.core.exceptions import LauncherError
from github_mcp_launcher.launcher import Command, CommandBuilder, Settings

__all__ = [
    "__version__",
    "Platform",
    "detect_platform",
    "LauncherError",
    "Command",
    "CommandBuilder",
    "Settings",
]
