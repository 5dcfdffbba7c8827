"""
Versioned on-disk cache of the github-mcp-server binary.

The cache root holds one directory per release, named
``{binary_name}-{version}``, each containing the extracted binary at
``{binary_name}-{version}/{binary_name}``. After a successful resolution only
the resolved version directory remains; older ones are pruned once the new
binary is confirmed present, never before.
"""

import logging
import os
import tempfile
from contextlib import nullcontext
from pathlib import Path
from typing import List, Optional

from github_mcp_launcher.core.download import DownloadProgress, download_file
from github_mcp_launcher.core.exceptions import (
    CacheError,
    DecompressError,
    DirectoryCreateError,
)
from github_mcp_launcher.core.filesystem import (
    extract_archive,
    is_regular_file,
    make_executable,
    remove_tree,
)
from github_mcp_launcher.core.locking import DEFAULT_LOCK_TIMEOUT, LockManager
from github_mcp_launcher.core.platform import Platform
from github_mcp_launcher.release.assets import BINARY_NAME, select_asset
from github_mcp_launcher.release.feed import Asset, GitHubReleaseFeed

logger = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_TIMEOUT = 60


def _log_progress(progress: DownloadProgress) -> None:
    logger.debug(f"Downloading: {progress}")


class VersionedBinaryCache:
    """
    Resolves the server binary, downloading it into a version directory if needed.

    The resolved path is memoized for the lifetime of the instance and
    re-validated with a single stat on every call.

    Example:
        >>> cache = VersionedBinaryCache(Path.cwd())
        >>> binary = cache.resolve(detect_platform())
        >>> print(binary)
        /work/github-mcp-server-v0.5.0/github-mcp-server
    """

    def __init__(
        self,
        cache_root: Path = Path("."),
        feed: Optional[GitHubReleaseFeed] = None,
        binary_name: str = BINARY_NAME,
        lock_manager: Optional[LockManager] = None,
        locking: bool = True,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
        download_timeout: int = DEFAULT_DOWNLOAD_TIMEOUT,
    ):
        """
        Initialize the cache.

        Args:
            cache_root: Directory holding version directories
            feed: Release feed (default: GitHub feed for github/github-mcp-server)
            binary_name: Name of the binary and prefix of version directories
            lock_manager: Lock manager (default: one whose locks live in cache_root)
            locking: Set to False to skip cross-process locking entirely
            lock_timeout: Seconds to wait for the cache lock
            download_timeout: Request timeout for asset downloads
        """
        self.cache_root = Path(cache_root)
        self.feed = feed or GitHubReleaseFeed()
        self.binary_name = binary_name
        if locking:
            self.lock_manager = lock_manager or LockManager(self.cache_root)
        else:
            self.lock_manager = None
        self.lock_timeout = lock_timeout
        self.download_timeout = download_timeout
        self._cached_path: Optional[Path] = None

    @property
    def cached_path(self) -> Optional[Path]:
        """Memoized binary path from the last successful resolution."""
        return self._cached_path

    def invalidate(self) -> None:
        """Forget the memoized binary path."""
        self._cached_path = None

    def version_dir_name(self, version: str) -> str:
        return f"{self.binary_name}-{version}"

    def binary_file_name(self, platform: Platform) -> str:
        return f"{self.binary_name}.exe" if platform.is_windows else self.binary_name

    def resolve(self, platform: Platform) -> Path:
        """
        Get the path of a usable server binary.

        Args:
            platform: Target platform

        Returns:
            Path to the executable binary

        Raises:
            FeedUnavailableError: If the release feed cannot be queried
            AssetNotFoundError: If the release has no asset for the platform
            DirectoryCreateError: If the version directory cannot be created
            DownloadError: If the asset download fails
            DecompressError: If the asset cannot be extracted
            MakeExecutableError: If the binary cannot be made executable
            CacheLockTimeout: If another process holds the cache lock too long
        """
        if self._cached_path is not None:
            if is_regular_file(self._cached_path):
                return self._cached_path
            logger.info(f"Cached binary disappeared, re-resolving: {self._cached_path}")
            self._cached_path = None

        release = self.feed.latest_release()
        asset = select_asset(release, platform, self.binary_name)
        keep = self.version_dir_name(release.version)

        self._ensure_directory(self.cache_root)

        with self._lock():
            version_dir = self._ensure_directory(self.cache_root / keep)
            binary_path = version_dir / self.binary_file_name(platform)

            if not is_regular_file(binary_path):
                self._install(asset, version_dir, binary_path, platform)
            else:
                logger.debug(f"Binary already present: {binary_path}")

            self.prune_stale_versions(keep)

        self._cached_path = binary_path
        return binary_path

    def _lock(self):
        if self.lock_manager is None:
            return nullcontext()
        return self.lock_manager.cache_lock(self.binary_name, timeout=self.lock_timeout)

    def _ensure_directory(self, directory: Path) -> Path:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreateError(str(directory), str(e)) from e
        return directory

    def _install(
        self, asset: Asset, version_dir: Path, binary_path: Path, platform: Platform
    ) -> None:
        """
        Download the asset and install its contents into version_dir.

        The archive is extracted into a staging directory inside the cache
        root and the binary is made executable there. Only then are the
        entries moved into version_dir, the binary last, so a binary at
        binary_path always comes from a complete install.
        """
        logger.info(f"Installing {asset.name} into {version_dir}")

        with tempfile.TemporaryDirectory(prefix="github-mcp-launcher-") as tmpdir:
            archive_path = Path(tmpdir) / asset.name
            download_file(
                asset.download_url,
                archive_path,
                expected_sha256=asset.sha256,
                progress_callback=_log_progress,
                timeout=self.download_timeout,
                max_retries=1,
            )

            # Leading dot keeps staging out of prune_stale_versions()
            with tempfile.TemporaryDirectory(
                prefix=f".{self.binary_name}-staging-", dir=self.cache_root
            ) as staging:
                staging_dir = Path(staging)
                extract_archive(archive_path, staging_dir, platform.archive_extension)

                staged_binary = staging_dir / binary_path.name
                if not is_regular_file(staged_binary):
                    raise DecompressError(
                        f"Extracted {asset.name} but {binary_path.name} was not found "
                        "in the archive"
                    )
                make_executable(staged_binary)

                self._move_into(staging_dir, version_dir, last=binary_path.name)

        logger.info(f"Installed binary: {binary_path}")

    def _move_into(self, staging_dir: Path, version_dir: Path, last: str) -> None:
        """Move every staged entry into version_dir, moving `last` after the others."""
        entries = sorted(staging_dir.iterdir(), key=lambda entry: entry.name == last)
        try:
            for entry in entries:
                target = version_dir / entry.name
                if target.is_dir() and not target.is_symlink():
                    remove_tree(target)
                os.replace(entry, target)
        except OSError as e:
            raise CacheError(f"Failed to install into {version_dir}: {e}") from e

    def prune_stale_versions(self, keep: str) -> List[Path]:
        """
        Remove every version directory except keep.

        Failures are logged and skipped; a leftover stale directory never
        fails a resolution.

        Args:
            keep: Name of the version directory to keep

        Returns:
            Paths that were removed
        """
        prefix = f"{self.binary_name}-"
        removed = []

        try:
            entries = list(self.cache_root.iterdir())
        except OSError as e:
            logger.warning(f"Failed to list cache root {self.cache_root}: {e}")
            return removed

        for entry in entries:
            if entry.name == keep or not entry.name.startswith(prefix):
                continue
            try:
                remove_tree(entry)
            except OSError as e:
                logger.warning(f"Failed to remove stale version {entry}: {e}")
                continue
            logger.info(f"Removed stale version: {entry.name}")
            removed.append(entry)

        return removed

    def installed_versions(self) -> List[str]:
        """List version directory names currently in the cache root."""
        if not self.cache_root.is_dir():
            return []
        prefix = f"{self.binary_name}-"
        return sorted(
            entry.name
            for entry in self.cache_root.iterdir()
            if entry.is_dir() and entry.name.startswith(prefix)
        )


__all__ = ["VersionedBinaryCache", "DEFAULT_DOWNLOAD_TIMEOUT"]
