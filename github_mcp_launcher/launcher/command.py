"""
Server command construction.

This module orchestrates the launcher components to answer one question per
server start: what executable to run, with which arguments and environment.

Workflow:
1. Read the acquisition strategy from the settings
2. Wrapper mode: locate the wrapper script and check its interpreter
3. npm mode: resolve the token, locate the package and check Node.js
4. Release mode: resolve the token, then resolve the cached release binary

Every failure raises; a partially built command is never returned.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from github_mcp_launcher.core.exceptions import (
    NpmPackageNotFoundError,
    WrapperNotFoundError,
    WrapperPrerequisiteMissingError,
)
from github_mcp_launcher.core.platform import Platform
from github_mcp_launcher.launcher.cache import VersionedBinaryCache
from github_mcp_launcher.launcher.credentials import (
    SERVER_TOKEN_ENV_VAR,
    CredentialResolver,
)
from github_mcp_launcher.launcher.npm import NpmPackageLocator
from github_mcp_launcher.launcher.settings import AcquisitionStrategy, Settings
from github_mcp_launcher.launcher.wrapper import (
    Interpreter,
    WrapperLocator,
    prerequisites_satisfied,
)

logger = logging.getLogger(__name__)

STDIO_ARGS = ("stdio",)


@dataclass(frozen=True)
class Command:
    """
    A fully resolved server command.

    Attributes:
        command: Executable path or name
        args: Arguments passed to the executable
        env: Variables added to the launched process environment
    """

    command: str
    args: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)

    @property
    def argv(self) -> List[str]:
        return [self.command, *self.args]

    def to_dict(self) -> Dict[str, Any]:
        return {"command": self.command, "args": list(self.args), "env": dict(self.env)}


class CommandBuilder:
    """
    Builds the command that starts the GitHub MCP server.

    Only the binary cache keeps state between calls; everything else is
    recomputed from the settings and platform passed to build().

    Example:
        >>> builder = CommandBuilder(Path.cwd())
        >>> command = builder.build(Settings(github_personal_access_token="ghp_x"),
        ...                         detect_platform())
        >>> command.args
        ['stdio']
    """

    def __init__(
        self,
        work_dir: Path = Path("."),
        cache: Optional[VersionedBinaryCache] = None,
        credentials: Optional[CredentialResolver] = None,
        wrapper_locator: Optional[WrapperLocator] = None,
        npm_locator: Optional[NpmPackageLocator] = None,
        prerequisite_probe: Callable[[Interpreter], bool] = prerequisites_satisfied,
    ):
        """
        Initialize command builder.

        Args:
            work_dir: Working directory holding the cache and wrappers/
            cache: Binary cache (default: cache rooted at work_dir)
            credentials: Token resolver (default: reads os.environ)
            wrapper_locator: Wrapper finder (default: looks under work_dir)
            npm_locator: npm package finder
            prerequisite_probe: Checks that an interpreter can be started
        """
        self.work_dir = Path(work_dir)
        self.cache = cache or VersionedBinaryCache(self.work_dir)
        self.credentials = credentials or CredentialResolver()
        self.wrapper_locator = wrapper_locator or WrapperLocator(self.work_dir)
        self.npm_locator = npm_locator or NpmPackageLocator()
        self.prerequisite_probe = prerequisite_probe

    def build(self, settings: Settings, platform: Platform) -> Command:
        """
        Build the server command.

        Raises:
            SettingsParseError: If the settings select conflicting strategies
            WrapperNotFoundError: If wrapper mode is on but no script exists
            WrapperPrerequisiteMissingError: If the needed interpreter is missing
            NpmPackageNotFoundError: If npm mode is on but the package is absent
            MissingCredentialError: If no token can be found
            LauncherError: Any release/cache failure from the binary cache
        """
        strategy = settings.strategy
        logger.debug(f"Building server command ({strategy.value}) for {platform}")

        if strategy is AcquisitionStrategy.WRAPPER:
            return self._wrapper_command(platform)
        if strategy is AcquisitionStrategy.NPM_PACKAGE:
            return self._npm_command(settings)
        return self._binary_command(settings, platform)

    def _wrapper_command(self, platform: Platform) -> Command:
        wrapper = self.wrapper_locator.locate(platform)
        if wrapper is None:
            raise WrapperNotFoundError(
                [str(p) for p in self.wrapper_locator.candidates(platform)]
            )

        if not self.prerequisite_probe(wrapper.interpreter):
            raise WrapperPrerequisiteMissingError(wrapper.interpreter.dependency)

        logger.info(f"Using wrapper script: {wrapper.path}")
        return Command(command=wrapper.command, args=wrapper.args, env={})

    def _npm_command(self, settings: Settings) -> Command:
        token = self.credentials.resolve(settings)

        entry_point = self.npm_locator.locate()
        if entry_point is None:
            raise NpmPackageNotFoundError()

        if not self.prerequisite_probe(Interpreter.NODE):
            raise WrapperPrerequisiteMissingError(Interpreter.NODE.dependency)

        logger.info(f"Using npm server package: {entry_point}")
        return Command(
            command=Interpreter.NODE.executable,
            args=Interpreter.NODE.build_args(str(entry_point)),
            env={SERVER_TOKEN_ENV_VAR: token},
        )

    def _binary_command(self, settings: Settings, platform: Platform) -> Command:
        token = self.credentials.resolve(settings)
        binary = self.cache.resolve(platform)

        return Command(
            command=str(binary),
            args=list(STDIO_ARGS),
            env={SERVER_TOKEN_ENV_VAR: token},
        )


__all__ = ["Command", "CommandBuilder", "STDIO_ARGS"]
