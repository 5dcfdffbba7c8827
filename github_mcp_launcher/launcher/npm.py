"""
Globally installed npm package discovery.

Finds the entry point of a GitHub MCP server installed with
``npm install -g``, for hosts that prefer the npm distribution over the
release binary.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

NPM_PACKAGE_ENTRY_POINTS = (
    "@modelcontextprotocol/server-github/dist/index.js",
    "mcp-server-github/dist/index.js",
)
NPM_TIMEOUT = 30


class NpmPackageLocator:
    """Locates the server package in the global npm modules root."""

    def __init__(
        self,
        which: Callable[[str], Optional[str]] = shutil.which,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self._which = which
        self._runner = runner

    def global_root(self) -> Optional[Path]:
        """
        Get the global node_modules directory reported by ``npm root -g``.

        Returns:
            The directory, or None if npm is missing or fails
        """
        npm = self._which("npm")
        if npm is None:
            logger.debug("npm not found on PATH")
            return None

        try:
            result = self._runner(
                [npm, "root", "-g"],
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                timeout=NPM_TIMEOUT,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"npm root -g failed: {e}")
            return None

        root = result.stdout.strip()
        if result.returncode != 0 or not root:
            logger.debug(f"npm root -g exited with {result.returncode}")
            return None
        return Path(root)

    def candidates(self, root: Path) -> List[Path]:
        return [root / entry for entry in NPM_PACKAGE_ENTRY_POINTS]

    def locate(self) -> Optional[Path]:
        """
        Find the installed server entry point.

        Returns:
            Path to the package's index.js, or None if not installed
        """
        root = self.global_root()
        if root is None:
            return None

        for candidate in self.candidates(root):
            if candidate.is_file():
                logger.debug(f"Found npm server package: {candidate}")
                return candidate

        logger.debug(f"No GitHub MCP server package under {root}")
        return None


__all__ = ["NpmPackageLocator", "NPM_PACKAGE_ENTRY_POINTS"]
