"""
Release feed access and asset selection.
"""

from .feed import Asset, Release, GitHubReleaseFeed
from .assets import BINARY_NAME, expected_asset_name, select_asset

__all__ = [
    "Asset",
    "Release",
    "GitHubReleaseFeed",
    "BINARY_NAME",
    "expected_asset_name",
    "select_asset",
]
