"""
Cross-platform file system utilities for github-mcp-launcher.

This module provides the file operations the binary cache relies on:
- Archive extraction (tar.gz, zip) with path traversal protection
- Marking extracted binaries as executable
- Safe directory removal

The archive format is passed in explicitly because it is chosen from the
target platform, not guessed from the downloaded file name.
"""

import os
import shutil
import stat
import sys
import tarfile
import zipfile
from pathlib import Path
from typing import Union

from github_mcp_launcher.core.exceptions import (
    DecompressError,
    InsecureArchiveError,
    MakeExecutableError,
    UnsupportedArchiveFormat,
)

IS_WINDOWS = os.name == "nt"

SUPPORTED_ARCHIVE_FORMATS = ("tar.gz", "zip")


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to parent.

    Args:
        path: Path to check
        parent: Potential parent path

    Returns:
        True if path is under parent
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "Extraction has been blocked."
        )


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
    archive_format: str,
) -> None:
    """
    Extract an archive into a destination directory.

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to (created if missing)
        archive_format: 'tar.gz' or 'zip'

    Raises:
        UnsupportedArchiveFormat: If archive_format is not supported
        InsecureArchiveError: If archive contains paths escaping destination
        DecompressError: If extraction fails

    Example:
        >>> extract_archive('server.tar.gz', 'github-mcp-server-v0.5.0', 'tar.gz')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if archive_format not in SUPPORTED_ARCHIVE_FORMATS:
        raise UnsupportedArchiveFormat(
            f"Unsupported archive format: {archive_format}. "
            f"Supported: {', '.join(SUPPORTED_ARCHIVE_FORMATS)}"
        )

    if not archive_path.exists():
        raise DecompressError(f"Archive not found: {archive_path}")

    destination.mkdir(parents=True, exist_ok=True)

    try:
        if archive_format == "zip":
            _extract_zip(archive_path, destination)
        else:
            _extract_tar_gz(archive_path, destination)
    except InsecureArchiveError:
        raise
    except (OSError, tarfile.TarError, zipfile.BadZipFile, EOFError) as e:
        raise DecompressError(f"Failed to extract {archive_path.name}: {e}") from e


def _extract_zip(archive_path: Path, destination: Path) -> None:
    """Extract a ZIP archive."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.namelist()

        for member in members:
            _validate_archive_path(member, destination)

        zf.extractall(destination)


def _extract_tar_gz(archive_path: Path, destination: Path) -> None:
    """Extract a .tar.gz archive."""
    with tarfile.open(archive_path, "r:gz") as tar:
        for member in tar.getmembers():
            _validate_archive_path(member.name, destination)

        # Extract with filter for security (Python 3.12+)
        if sys.version_info >= (3, 12):
            tar.extractall(destination, filter="data")
        else:
            tar.extractall(destination)


# ============================================================================
# File Operations
# ============================================================================


def make_executable(path: Union[str, Path]) -> None:
    """
    Add execute permission bits to a file.

    Args:
        path: File to mark executable

    Raises:
        MakeExecutableError: If the file is missing or chmod fails
    """
    path = Path(path)

    try:
        mode = path.stat().st_mode
        path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as e:
        raise MakeExecutableError(str(path), str(e)) from e


def is_regular_file(path: Union[str, Path]) -> bool:
    """Return True if path exists and is a regular file (never raises)."""
    try:
        return Path(path).is_file()
    except OSError:
        return False


def remove_tree(path: Union[str, Path]) -> None:
    """
    Remove a directory tree or a single file.

    Read-only entries are made writable and retried on Windows.

    Raises:
        OSError: If the entry cannot be removed
    """
    path = Path(path)

    if path.is_symlink() or path.is_file():
        path.unlink()
        return

    if not path.exists():
        return

    if IS_WINDOWS:

        def handle_remove_readonly(func, target, exc):
            """Error handler for Windows read-only files."""
            if not os.access(target, os.W_OK):
                os.chmod(target, stat.S_IWRITE)
                func(target)
            else:
                raise

        shutil.rmtree(path, onerror=handle_remove_readonly)
    else:
        shutil.rmtree(path)


__all__ = [
    "SUPPORTED_ARCHIVE_FORMATS",
    "extract_archive",
    "make_executable",
    "is_regular_file",
    "is_relative_to",
    "remove_tree",
]
