"""
Wrapper script discovery.

Wrapper mode launches a user-supplied script from ``wrappers/`` instead of the
release binary. The script is chosen by platform, with the Node.js script as
a fallback that runs anywhere.
"""

import logging
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from github_mcp_launcher.core.platform import OS, Platform

logger = logging.getLogger(__name__)

WRAPPERS_DIR = "wrappers"
WRAPPER_STEM = "github-mcp-wrapper"
PROBE_TIMEOUT = 10


class Interpreter(Enum):
    """Interpreters able to run a wrapper script."""

    POWERSHELL = ("powershell", "PowerShell", ".ps1")
    SHELL = ("bash", "Bash shell", ".sh")
    NODE = ("node", "Node.js", ".js")

    def __init__(self, executable: str, dependency: str, suffix: str):
        self.executable = executable
        self.dependency = dependency
        self.suffix = suffix

    def build_args(self, script: str) -> List[str]:
        """Get the arguments that make this interpreter run script."""
        if self is Interpreter.POWERSHELL:
            return ["-ExecutionPolicy", "Bypass", "-File", script]
        return [script]


@dataclass(frozen=True)
class WrapperScript:
    """A wrapper script found on disk and the interpreter that runs it."""

    interpreter: Interpreter
    path: Path

    @property
    def command(self) -> str:
        return self.interpreter.executable

    @property
    def args(self) -> List[str]:
        return self.interpreter.build_args(str(self.path))


def _search_order(platform: Platform) -> Tuple[Interpreter, ...]:
    if platform.os is OS.WINDOWS:
        return (Interpreter.POWERSHELL, Interpreter.NODE)
    return (Interpreter.SHELL, Interpreter.NODE)


class WrapperLocator:
    """
    Finds wrapper scripts relative to a working directory.

    Nothing is cached; every call probes the filesystem again.
    """

    def __init__(self, work_dir: Path = Path(".")):
        self.work_dir = Path(work_dir)

    def script_path(self, interpreter: Interpreter) -> Path:
        return self.work_dir / WRAPPERS_DIR / f"{WRAPPER_STEM}{interpreter.suffix}"

    def candidates(self, platform: Platform) -> List[Path]:
        """Paths checked for platform, in order."""
        return [self.script_path(i) for i in _search_order(platform)]

    def locate(self, platform: Platform) -> Optional[WrapperScript]:
        """
        Find the wrapper script for a platform.

        Returns:
            The first script present, or None if there is none
        """
        for interpreter in _search_order(platform):
            path = self.script_path(interpreter)
            if path.exists():
                logger.debug(f"Found wrapper script: {path}")
                return WrapperScript(interpreter=interpreter, path=path)

        logger.debug(f"No wrapper script found under {self.work_dir / WRAPPERS_DIR}")
        return None


def prerequisites_satisfied(interpreter: Interpreter) -> bool:
    """
    Check that an interpreter can be started.

    Runs ``<interpreter> --version``. Only the ability to start the process
    matters; its exit code and output are ignored.
    """
    try:
        subprocess.run(
            [interpreter.executable, "--version"],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            timeout=PROBE_TIMEOUT,
        )
    except subprocess.TimeoutExpired:
        # Started but slow to answer
        return True
    except OSError as e:
        logger.debug(f"Could not start {interpreter.executable}: {e}")
        return False
    return True


__all__ = [
    "Interpreter",
    "WrapperScript",
    "WrapperLocator",
    "prerequisites_satisfied",
]
