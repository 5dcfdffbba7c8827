"""
Core functionality for github-mcp-launcher.

This package contains the foundational modules that other components depend on.
"""

from .platform import (
    OS,
    Arch,
    Platform,
    identify_platform,
    detect_platform,
    all_platforms,
    clear_platform_cache,
)

from .locking import (
    LockManager,
)

from .exceptions import (
    LauncherError,
    UnsupportedPlatformError,
    ReleaseError,
    FeedUnavailableError,
    AssetNotFoundError,
    CacheError,
    DirectoryCreateError,
    DownloadError,
    ChecksumError,
    DecompressError,
    UnsupportedArchiveFormat,
    InsecureArchiveError,
    MakeExecutableError,
    CacheLockTimeout,
    WrapperError,
    WrapperNotFoundError,
    WrapperPrerequisiteMissingError,
    NpmPackageNotFoundError,
    MissingCredentialError,
    SettingsParseError,
)

__all__ = [
    "OS",
    "Arch",
    "Platform",
    "identify_platform",
    "detect_platform",
    "all_platforms",
    "clear_platform_cache",
    "LockManager",
    "LauncherError",
    "UnsupportedPlatformError",
    "ReleaseError",
    "FeedUnavailableError",
    "AssetNotFoundError",
    "CacheError",
    "DirectoryCreateError",
    "DownloadError",
    "ChecksumError",
    "DecompressError",
    "UnsupportedArchiveFormat",
    "InsecureArchiveError",
    "MakeExecutableError",
    "CacheLockTimeout",
    "WrapperError",
    "WrapperNotFoundError",
    "WrapperPrerequisiteMissingError",
    "NpmPackageNotFoundError",
    "MissingCredentialError",
    "SettingsParseError",
]
