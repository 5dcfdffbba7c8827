"""
Platform identification for github-mcp-launcher.

This module maps the host operating system and CPU architecture to the
vocabulary used by the github-mcp-server release assets.

Features:
- Closed OS/architecture enums (mac, linux, windows / aarch64, x86, x86_64)
- Pure, total mapping to release tokens (Darwin/Linux/Windows, arm64/i386/x86_64)
- Archive extension selection (tar.gz on Unix, zip on Windows)
- Host detection with caching (runs once per process)

Usage:
    from github_mcp_launcher.core.platform import detect_platform

    platform_info = detect_platform()
    print(platform_info.identify())  # ('Linux', 'x86_64', 'tar.gz')
"""

import functools
import platform
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from github_mcp_launcher.core.exceptions import UnsupportedPlatformError


class OS(Enum):
    """Operating systems the launcher supports."""

    MAC = "mac"
    LINUX = "linux"
    WINDOWS = "windows"


class Arch(Enum):
    """CPU architectures the launcher supports."""

    AARCH64 = "aarch64"
    X86 = "x86"
    X86_64 = "x86_64"


OS_TOKENS = {
    OS.MAC: "Darwin",
    OS.LINUX: "Linux",
    OS.WINDOWS: "Windows",
}

ARCH_TOKENS = {
    Arch.AARCH64: "arm64",
    Arch.X86: "i386",
    Arch.X86_64: "x86_64",
}

ARCHIVE_EXTENSIONS = {
    OS.MAC: "tar.gz",
    OS.LINUX: "tar.gz",
    OS.WINDOWS: "zip",
}

# platform.system() values
_SYSTEM_ALIASES = {
    "darwin": OS.MAC,
    "linux": OS.LINUX,
    "windows": OS.WINDOWS,
}

# platform.machine() values
_MACHINE_ALIASES = {
    "aarch64": Arch.AARCH64,
    "arm64": Arch.AARCH64,
    "x86_64": Arch.X86_64,
    "amd64": Arch.X86_64,
    "x64": Arch.X86_64,
    "i386": Arch.X86,
    "i486": Arch.X86,
    "i586": Arch.X86,
    "i686": Arch.X86,
    "x86": Arch.X86,
}


def identify_platform(os: OS, arch: Arch) -> Tuple[str, str, str]:
    """
    Map an OS/architecture pair to release naming tokens.

    Args:
        os: Operating system
        arch: CPU architecture

    Returns:
        Tuple of (os_token, arch_token, archive_extension)

    Example:
        >>> identify_platform(OS.MAC, Arch.AARCH64)
        ('Darwin', 'arm64', 'tar.gz')
    """
    return OS_TOKENS[os], ARCH_TOKENS[arch], ARCHIVE_EXTENSIONS[os]


@dataclass(frozen=True)
class Platform:
    """
    Target platform of a resolution.

    Attributes:
        os: Operating system
        arch: CPU architecture
    """

    os: OS
    arch: Arch

    @property
    def os_token(self) -> str:
        return OS_TOKENS[self.os]

    @property
    def arch_token(self) -> str:
        return ARCH_TOKENS[self.arch]

    @property
    def archive_extension(self) -> str:
        return ARCHIVE_EXTENSIONS[self.os]

    @property
    def is_windows(self) -> bool:
        return self.os is OS.WINDOWS

    def identify(self) -> Tuple[str, str, str]:
        """Get (os_token, arch_token, archive_extension) for this platform."""
        return identify_platform(self.os, self.arch)

    def __str__(self) -> str:
        return f"{self.os.value}-{self.arch.value}"


@functools.lru_cache(maxsize=1)
def detect_platform() -> Platform:
    """
    Detect the host platform.

    This function is cached - it only runs detection once per process.

    Returns:
        Platform of the running host

    Raises:
        UnsupportedPlatformError: If the host OS or CPU is not supported
    """
    system = platform.system().lower()
    machine = platform.machine().lower()

    if system not in _SYSTEM_ALIASES:
        raise UnsupportedPlatformError(f"Unsupported operating system: {system}")
    if machine not in _MACHINE_ALIASES:
        raise UnsupportedPlatformError(f"Unsupported architecture: {machine}")

    return Platform(os=_SYSTEM_ALIASES[system], arch=_MACHINE_ALIASES[machine])


def all_platforms() -> List[Platform]:
    """List every supported OS/architecture pair."""
    return [Platform(os=o, arch=a) for o in OS for a in Arch]


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "OS",
    "Arch",
    "Platform",
    "identify_platform",
    "detect_platform",
    "all_platforms",
    "clear_platform_cache",
]
