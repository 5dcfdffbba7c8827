"""
GitHub release feed client.

Queries the GitHub Releases REST API for the newest stable release of a
repository that actually ships downloadable assets.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import requests
from requests.exceptions import RequestException

from github_mcp_launcher.core.exceptions import FeedUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
API_URL_ENV_VAR = "GITHUB_MCP_LAUNCHER_API_URL"
DEFAULT_REPOSITORY = "github/github-mcp-server"
DEFAULT_TIMEOUT = 30
RELEASES_PER_PAGE = 30


@dataclass(frozen=True)
class Asset:
    """
    A single downloadable file attached to a release.

    Attributes:
        name: File name, matched exactly against the expected asset name
        download_url: Direct download URL
        sha256: Hex digest published by the feed, if any
    """

    name: str
    download_url: str
    sha256: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Asset":
        _require_object(payload, "asset")
        return cls(
            name=_require_string(payload, "name"),
            download_url=_require_string(payload, "browser_download_url"),
            sha256=_parse_digest(payload.get("digest")),
        )


def _require_object(payload: Any, what: str) -> None:
    if not isinstance(payload, dict):
        raise TypeError(f"{what} must be an object, got {type(payload).__name__}")


def _require_string(payload: Dict[str, Any], key: str) -> str:
    value = payload[key]
    if not isinstance(value, str) or not value:
        raise TypeError(f"'{key}' must be a non-empty string, got {value!r}")
    return value


def _parse_digest(digest: Optional[str]) -> Optional[str]:
    """Extract the hex value from a 'sha256:<hex>' digest; other algorithms are ignored."""
    if not digest or not isinstance(digest, str):
        return None
    algorithm, _, value = digest.partition(":")
    if algorithm.lower() != "sha256" or not value:
        return None
    return value


@dataclass(frozen=True)
class Release:
    """
    A published release.

    Attributes:
        version: Release tag, used verbatim (e.g. 'v0.5.0')
        assets: Downloadable assets, in feed order
        prerelease: Whether the release is marked as a prerelease
        draft: Whether the release is an unpublished draft
    """

    version: str
    assets: Tuple[Asset, ...] = field(default_factory=tuple)
    prerelease: bool = False
    draft: bool = False

    @property
    def is_eligible(self) -> bool:
        """Stable, published, and has at least one asset."""
        return not self.prerelease and not self.draft and bool(self.assets)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Release":
        """
        Build a Release from a GitHub API release object.

        Raises:
            KeyError: If required fields are missing
            TypeError: If fields have unexpected types
            ValueError: If the tag cannot name a version directory
        """
        _require_object(payload, "release")
        version = _require_string(payload, "tag_name")
        if "/" in version or "\\" in version or version in (".", ".."):
            raise ValueError(f"tag_name {version!r} is not a valid version name")

        assets = tuple(Asset.from_api(a) for a in payload.get("assets") or [])
        return cls(
            version=version,
            assets=assets,
            prerelease=bool(payload.get("prerelease", False)),
            draft=bool(payload.get("draft", False)),
        )


class GitHubReleaseFeed:
    """
    Release feed backed by the GitHub Releases API.

    Example:
        >>> feed = GitHubReleaseFeed("github/github-mcp-server")
        >>> release = feed.latest_release()
        >>> print(release.version)
        v0.5.0
    """

    def __init__(
        self,
        repository: str = DEFAULT_REPOSITORY,
        api_url: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize release feed.

        Args:
            repository: Repository in 'owner/name' form
            api_url: API base URL (default: $GITHUB_MCP_LAUNCHER_API_URL or api.github.com)
            timeout: Request timeout in seconds
            token: Optional API token, only used to raise rate limits
            session: Optional requests session
        """
        self.repository = repository
        self.api_url = (
            api_url or os.environ.get(API_URL_ENV_VAR) or DEFAULT_API_URL
        ).rstrip("/")
        self.timeout = timeout
        self.token = token
        self.session = session or requests.Session()

    @property
    def releases_url(self) -> str:
        return f"{self.api_url}/repos/{self.repository}/releases"

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def list_releases(self) -> List[Release]:
        """
        Fetch the most recent releases, newest first.

        Raises:
            FeedUnavailableError: On transport, HTTP, or payload errors
        """
        logger.debug(f"Querying release feed: {self.releases_url}")

        try:
            response = self.session.get(
                self.releases_url,
                headers=self._headers(),
                params={"per_page": RELEASES_PER_PAGE},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except RequestException as e:
            raise FeedUnavailableError(self.repository, str(e)) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise FeedUnavailableError(
                self.repository, f"invalid JSON response: {e}"
            ) from e

        if not isinstance(payload, list):
            raise FeedUnavailableError(
                self.repository, "unexpected response, expected a list of releases"
            )

        try:
            return [Release.from_api(item) for item in payload]
        except (KeyError, TypeError, ValueError) as e:
            raise FeedUnavailableError(
                self.repository, f"malformed release entry: {e}"
            ) from e

    def latest_release(self) -> Release:
        """
        Get the newest non-prerelease, non-draft release with assets.

        Raises:
            FeedUnavailableError: If the feed fails or has no eligible release
        """
        for release in self.list_releases():
            if release.is_eligible:
                logger.debug(
                    f"Latest release of {self.repository}: {release.version} "
                    f"({len(release.assets)} assets)"
                )
                return release

        raise FeedUnavailableError(
            self.repository, "no stable release with assets was found"
        )


__all__ = [
    "Asset",
    "Release",
    "GitHubReleaseFeed",
    "DEFAULT_API_URL",
    "DEFAULT_REPOSITORY",
    "API_URL_ENV_VAR",
]
