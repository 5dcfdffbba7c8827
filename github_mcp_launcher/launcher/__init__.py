"""
Server command resolution.

This package decides what to run to start the GitHub MCP server: the cached
release binary, a wrapper script, or a globally installed npm package.
"""

from .settings import AcquisitionStrategy, Settings, load_settings
from .credentials import CredentialResolver, TOKEN_ENV_VARS, SERVER_TOKEN_ENV_VAR
from .cache import VersionedBinaryCache
from .wrapper import Interpreter, WrapperScript, WrapperLocator, prerequisites_satisfied
from .npm import NpmPackageLocator
from .command import Command, CommandBuilder

__all__ = [
    "AcquisitionStrategy",
    "Settings",
    "load_settings",
    "CredentialResolver",
    "TOKEN_ENV_VARS",
    "SERVER_TOKEN_ENV_VAR",
    "VersionedBinaryCache",
    "Interpreter",
    "WrapperScript",
    "WrapperLocator",
    "prerequisites_satisfied",
    "NpmPackageLocator",
    "Command",
    "CommandBuilder",
]
