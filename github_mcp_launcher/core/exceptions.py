"""
Centralized exception hierarchy for github-mcp-launcher.

Every failure that aborts command construction derives from LauncherError,
so the host only needs to catch one type. Each exception keeps the values
needed to diagnose it as attributes.
"""

from typing import Iterable, Sequence


# ============================================================================
# Base Exceptions
# ============================================================================


class LauncherError(Exception):
    """Base exception for all github-mcp-launcher errors."""

    pass


class UnsupportedPlatformError(LauncherError):
    """Raised when the host reports an OS or CPU outside the supported set."""

    pass


# ============================================================================
# Release Feed Exceptions
# ============================================================================


class ReleaseError(LauncherError):
    """Base exception for release feed errors."""

    pass


class FeedUnavailableError(ReleaseError):
    """Raised when the release feed cannot be queried or has no eligible release."""

    def __init__(self, repository: str, reason: str):
        self.repository = repository
        self.reason = reason
        super().__init__(f"Failed to fetch latest release of {repository}: {reason}")


class AssetNotFoundError(ReleaseError):
    """Raised when a release has no asset with the exact expected name."""

    def __init__(self, expected: str, available: Iterable[str] = ()):
        self.expected = expected
        self.available = list(available)
        msg = f"No asset found matching {expected!r}"
        if self.available:
            msg += f" (available: {', '.join(self.available)})"
        super().__init__(msg)


# ============================================================================
# Cache Exceptions
# ============================================================================


class CacheError(LauncherError):
    """Base exception for versioned cache errors."""

    pass


class DirectoryCreateError(CacheError):
    """Raised when a version directory cannot be created."""

    def __init__(self, directory: str, reason: str):
        self.directory = directory
        super().__init__(f"Failed to create directory '{directory}': {reason}")


class DownloadError(CacheError):
    """Raised when a release asset cannot be downloaded."""

    pass


class ChecksumError(DownloadError):
    """Raised when a downloaded file does not match its expected checksum."""

    pass


class DecompressError(CacheError):
    """Raised when a downloaded archive cannot be extracted."""

    pass


class UnsupportedArchiveFormat(DecompressError):
    """Archive format is not supported."""

    pass


class InsecureArchiveError(DecompressError):
    """Archive contains members that would escape the destination."""

    pass


class MakeExecutableError(CacheError):
    """Raised when the extracted binary cannot be marked executable."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Failed to make '{path}' executable: {reason}")


class CacheLockTimeout(CacheError):
    """Raised when the cache lock cannot be acquired within the timeout."""

    pass


# ============================================================================
# Launch Strategy Exceptions
# ============================================================================


class WrapperError(LauncherError):
    """Base exception for wrapper and npm launch strategies."""

    pass


class WrapperNotFoundError(WrapperError):
    """Raised when wrapper mode is enabled but no wrapper script exists."""

    def __init__(self, searched: Sequence[str] = ()):
        self.searched = list(searched)
        super().__init__(
            "Wrapper mode enabled but no wrapper script found in wrappers/ directory. "
            "Please disable wrapper mode or use traditional token configuration."
        )


class WrapperPrerequisiteMissingError(WrapperError):
    """Raised when the interpreter needed by a launch strategy cannot be started."""

    def __init__(self, dependency: str):
        self.dependency = dependency
        super().__init__(
            f"Wrapper script found but {dependency} not available. "
            f"Please install {dependency} or disable wrapper mode."
        )


class NpmPackageNotFoundError(WrapperError):
    """Raised when npm mode is enabled but the server package is not installed."""

    def __init__(self, candidates: Sequence[str] = ()):
        self.candidates = list(candidates)
        super().__init__(
            "npm package mode enabled but no globally installed GitHub MCP server "
            "package was found. Install it with: "
            "npm install -g @modelcontextprotocol/server-github"
        )


# ============================================================================
# Credential and Settings Exceptions
# ============================================================================


class MissingCredentialError(LauncherError):
    """Raised when no token is available from settings or the environment."""

    def __init__(self, setting: str, env_vars: Sequence[str]):
        self.setting = setting
        self.env_vars = list(env_vars)
        super().__init__(
            f"No GitHub token found. Please set `{setting}` in settings, "
            f"set {'/'.join(self.env_vars)} environment variable, "
            "or enable `use_wrapper_script` for automatic authentication. "
            "You can get a token with: gh auth token"
        )


class SettingsParseError(LauncherError):
    """Raised when host settings are malformed."""

    def __init__(self, message: str, key: str = ""):
        self.key = key
        super().__init__(message)


__all__ = [
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
