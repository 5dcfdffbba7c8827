"""
Host-supplied context server settings.

Settings arrive per invocation as a JSON-like mapping (or a YAML/JSON file
when run from the command line) and are never persisted.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from github_mcp_launcher.core.exceptions import SettingsParseError

logger = logging.getLogger(__name__)

TOKEN_SETTING = "github_personal_access_token"
WRAPPER_SETTING = "use_wrapper_script"
NPM_SETTING = "use_npm_package"


class AcquisitionStrategy(Enum):
    """How the server process is obtained."""

    RELEASE_BINARY = "release_binary"
    WRAPPER = "wrapper"
    NPM_PACKAGE = "npm_package"


@dataclass(frozen=True)
class Settings:
    """
    Context server settings.

    Attributes:
        github_personal_access_token: Explicit token, overrides the environment
        use_wrapper_script: Launch a script from wrappers/ instead of the binary
        use_npm_package: Launch a globally installed npm server package
    """

    github_personal_access_token: Optional[str] = None
    use_wrapper_script: Optional[bool] = None
    use_npm_package: Optional[bool] = None

    @property
    def strategy(self) -> AcquisitionStrategy:
        """
        Get the acquisition strategy these settings select.

        Raises:
            SettingsParseError: If more than one alternate strategy is enabled
        """
        if self.use_wrapper_script and self.use_npm_package:
            raise SettingsParseError(
                f"`{WRAPPER_SETTING}` and `{NPM_SETTING}` cannot both be enabled",
                key=NPM_SETTING,
            )
        if self.use_wrapper_script:
            return AcquisitionStrategy.WRAPPER
        if self.use_npm_package:
            return AcquisitionStrategy.NPM_PACKAGE
        return AcquisitionStrategy.RELEASE_BINARY

    def merged(self, **overrides: Any) -> "Settings":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_mapping(cls, value: Optional[Mapping[str, Any]]) -> "Settings":
        """
        Parse settings from a mapping.

        Accepts None (all defaults), a settings object, or a context server
        entry whose settings are nested under a "settings" key. Unknown keys
        are ignored.

        Raises:
            SettingsParseError: If the value or a known key has the wrong type
        """
        if value is None:
            return cls()

        if not isinstance(value, Mapping):
            raise SettingsParseError(
                f"Settings must be a mapping, got {type(value).__name__}"
            )

        if "settings" in value:
            return cls.from_mapping(value["settings"])

        token = value.get(TOKEN_SETTING)
        if token is not None and not isinstance(token, str):
            raise SettingsParseError(
                f"`{TOKEN_SETTING}` must be a string, got {type(token).__name__}",
                key=TOKEN_SETTING,
            )

        return cls(
            github_personal_access_token=token,
            use_wrapper_script=_optional_bool(value, WRAPPER_SETTING),
            use_npm_package=_optional_bool(value, NPM_SETTING),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            TOKEN_SETTING: self.github_personal_access_token,
            WRAPPER_SETTING: self.use_wrapper_script,
            NPM_SETTING: self.use_npm_package,
        }


def _optional_bool(value: Mapping[str, Any], key: str) -> Optional[bool]:
    flag = value.get(key)
    if flag is not None and not isinstance(flag, bool):
        raise SettingsParseError(
            f"`{key}` must be a boolean, got {type(flag).__name__}", key=key
        )
    return flag


def load_settings(settings_file: Path) -> Settings:
    """
    Load settings from a YAML or JSON file.

    Args:
        settings_file: Path to the settings file

    Returns:
        Parsed settings

    Raises:
        SettingsParseError: If the file is missing, unreadable or malformed

    Example:
        >>> settings = load_settings(Path("settings.json"))
        >>> settings.use_wrapper_script
        False
    """
    logger.debug(f"Loading settings from {settings_file}")

    try:
        with open(settings_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise SettingsParseError(f"Cannot read settings file {settings_file}: {e}") from e
    except yaml.YAMLError as e:
        raise SettingsParseError(f"Invalid settings in {settings_file}: {e}") from e

    return Settings.from_mapping(data)


__all__ = [
    "AcquisitionStrategy",
    "Settings",
    "load_settings",
    "TOKEN_SETTING",
    "WRAPPER_SETTING",
    "NPM_SETTING",
]
