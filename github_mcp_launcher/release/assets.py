"""
Release asset selection.

Picks the one asset of a release built for a given platform. Names must match
exactly so checksum files and debug builds are never picked by accident.
"""

import logging

from github_mcp_launcher.core.exceptions import AssetNotFoundError
from github_mcp_launcher.core.platform import Platform
from github_mcp_launcher.release.feed import Asset, Release

logger = logging.getLogger(__name__)

BINARY_NAME = "github-mcp-server"


def expected_asset_name(platform: Platform, binary_name: str = BINARY_NAME) -> str:
    """
    Get the asset name published for a platform.

    Example:
        >>> expected_asset_name(Platform(OS.LINUX, Arch.X86_64))
        'github-mcp-server_Linux_x86_64.tar.gz'
    """
    os_token, arch_token, extension = platform.identify()
    return f"{binary_name}_{os_token}_{arch_token}.{extension}"


def select_asset(
    release: Release, platform: Platform, binary_name: str = BINARY_NAME
) -> Asset:
    """
    Select the asset of a release matching a platform.

    Args:
        release: Release to search
        platform: Target platform
        binary_name: Binary name prefix used in asset names

    Returns:
        The asset whose name equals the expected name

    Raises:
        AssetNotFoundError: If no asset name matches exactly
    """
    asset_name = expected_asset_name(platform, binary_name)

    for asset in release.assets:
        if asset.name == asset_name:
            logger.debug(f"Selected asset {asset.name} from {release.version}")
            return asset

    raise AssetNotFoundError(asset_name, (a.name for a in release.assets))


__all__ = ["BINARY_NAME", "expected_asset_name", "select_asset"]
