"""
GitHub token resolution.

Explicit settings always override the environment. Of the environment
variables, GITHUB_TOKEN is checked before GITHUB_PERSONAL_ACCESS_TOKEN.
"""

import logging
import os
from typing import Iterator, Mapping, Optional, Tuple

from github_mcp_launcher.core.exceptions import MissingCredentialError
from github_mcp_launcher.launcher.settings import TOKEN_SETTING, Settings

logger = logging.getLogger(__name__)

TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GITHUB_PERSONAL_ACCESS_TOKEN")
SERVER_TOKEN_ENV_VAR = "GITHUB_PERSONAL_ACCESS_TOKEN"


class CredentialResolver:
    """Determines the token handed to the server process."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """
        Args:
            environ: Environment to read (default: os.environ at call time)
        """
        self._environ = environ

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def sources(self, settings: Settings) -> Iterator[Tuple[str, Optional[str]]]:
        """Yield (source, value) pairs in precedence order."""
        yield TOKEN_SETTING, settings.github_personal_access_token
        for name in TOKEN_ENV_VARS:
            yield name, self.environ.get(name)

    def resolve_with_source(self, settings: Settings) -> Tuple[str, str]:
        """
        Get the token and the name of the source it came from.

        Raises:
            MissingCredentialError: If every source is empty
        """
        for source, value in self.sources(settings):
            if value:
                logger.debug(f"Using GitHub token from {source}")
                return value, source

        raise MissingCredentialError(TOKEN_SETTING, TOKEN_ENV_VARS)

    def resolve(self, settings: Settings) -> str:
        """
        Get the first non-empty token.

        Raises:
            MissingCredentialError: If every source is empty
        """
        token, _ = self.resolve_with_source(settings)
        return token


__all__ = ["CredentialResolver", "TOKEN_ENV_VARS", "SERVER_TOKEN_ENV_VAR"]
