"""
Concurrent access control for the binary cache.

Two host instances may resolve the server binary against the same cache root
at the same time. The version-directory creation, download and pruning
sequence is therefore run under a cross-process file lock.

Features:
- Cross-platform, cross-process file locking (via the `filelock` library)
- Timeout support to prevent hanging
- Automatic release on process death
- Lock files are dot-files so they never look like version directories

Usage:
    from github_mcp_launcher.core.locking import LockManager

    lock_manager = LockManager(cache_root)
    with lock_manager.cache_lock("github-mcp-server", timeout=300):
        # Safely download and prune versions
        pass
"""

import logging
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout as LockTimeout

from github_mcp_launcher.core.exceptions import CacheLockTimeout

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 300


class LockManager:
    """
    Manages file locks for a cache root.

    Attributes:
        lock_dir: Directory where lock files are stored
    """

    def __init__(self, lock_dir: Path):
        """
        Initialize lock manager.

        Args:
            lock_dir: Directory for lock files (created on first lock)
        """
        self.lock_dir = Path(lock_dir)

    def lock_path(self, name: str) -> Path:
        """Get the lock file path for a named resource."""
        safe_name = name.replace("/", "-").replace("\\", "-").replace(":", "-")
        return self.lock_dir / f".{safe_name}.lock"

    @contextmanager
    def cache_lock(self, name: str, timeout: float = DEFAULT_LOCK_TIMEOUT):
        """
        Acquire the lock guarding one binary's cache entries.

        Args:
            name: Binary name the lock protects
            timeout: Maximum wait time in seconds (default: 300 for long downloads)

        Yields:
            None

        Raises:
            CacheLockTimeout: If lock can't be acquired within timeout
        """
        self.lock_dir.mkdir(parents=True, exist_ok=True)
        lock_path = self.lock_path(name)
        lock = FileLock(lock_path, timeout=timeout)

        try:
            with lock:
                logger.debug(f"Acquired cache lock: {lock_path}")
                yield
                logger.debug(f"Released cache lock: {lock_path}")
        except LockTimeout as e:
            raise CacheLockTimeout(
                f"Could not acquire cache lock for {name} after {timeout}s. "
                "Another process may be downloading this binary."
            ) from e


__all__ = [
    "LockManager",
    "LockTimeout",
    "DEFAULT_LOCK_TIMEOUT",
]
