"""
Unit tests for the GitHub release feed client.

Network traffic is mocked with the responses library.
"""

import pytest
import responses

from github_mcp_launcher.core.exceptions import FeedUnavailableError
from github_mcp_launcher.release.feed import (
    API_URL_ENV_VAR,
    Asset,
    GitHubReleaseFeed,
    Release,
)
from tests.fixtures.releases import release_payload

RELEASES_URL = "https://api.github.com/repos/github/github-mcp-server/releases"


@pytest.fixture
def feed(monkeypatch):
    """Feed pointed at the public API regardless of the environment."""
    monkeypatch.delenv(API_URL_ENV_VAR, raising=False)
    return GitHubReleaseFeed()


class TestRelease:
    """Tests for the Release dataclass."""

    def test_from_api(self):
        """Test parsing a GitHub API release object."""
        release = Release.from_api(
            release_payload("v0.5.0", "github-mcp-server_Linux_x86_64.tar.gz")
        )

        assert release.version == "v0.5.0"
        assert release.assets == (
            Asset(
                name="github-mcp-server_Linux_x86_64.tar.gz",
                download_url=(
                    "https://github.com/github/github-mcp-server/releases/download/"
                    "v0.5.0/github-mcp-server_Linux_x86_64.tar.gz"
                ),
            ),
        )
        assert release.is_eligible

    @pytest.mark.parametrize(
        "digest, expected",
        [
            ("sha256:abc123", "abc123"),
            ("SHA256:abc123", "abc123"),
            ("sha512:abc123", None),
            ("sha256:", None),
            (None, None),
        ],
    )
    def test_asset_digest(self, digest, expected):
        """Test only sha256 digests published by the feed are kept."""
        asset = Asset.from_api(
            {"name": "a", "browser_download_url": "https://x/a", "digest": digest}
        )
        assert asset.sha256 == expected

    def test_null_assets(self):
        """Test a null asset list parses as empty."""
        release = Release.from_api({"tag_name": "v1", "assets": None})
        assert release.assets == ()
        assert not release.is_eligible

    @pytest.mark.parametrize(
        "prerelease, draft, names, eligible",
        [
            (False, False, ("a",), True),
            (True, False, ("a",), False),
            (False, True, ("a",), False),
            (False, False, (), False),
        ],
    )
    def test_eligibility(self, prerelease, draft, names, eligible):
        """Test prerelease, draft and empty releases are not eligible."""
        release = Release.from_api(
            release_payload("v1", *names, prerelease=prerelease, draft=draft)
        )
        assert release.is_eligible is eligible


class TestGitHubReleaseFeed:
    """Tests for GitHubReleaseFeed."""

    @responses.activate
    def test_latest_release(self, feed):
        """Test the newest eligible release is returned."""
        responses.add(
            responses.GET,
            RELEASES_URL,
            json=[
                release_payload("v0.6.0", "github-mcp-server_Linux_x86_64.tar.gz"),
                release_payload("v0.5.0", "github-mcp-server_Linux_x86_64.tar.gz"),
            ],
            status=200,
        )

        release = feed.latest_release()

        assert release.version == "v0.6.0"

    @responses.activate
    def test_skips_ineligible_releases(self, feed):
        """Test prereleases, drafts and empty releases are skipped."""
        responses.add(
            responses.GET,
            RELEASES_URL,
            json=[
                release_payload("v0.7.0-rc1", "x.tar.gz", prerelease=True),
                release_payload("v0.7.0", "x.tar.gz", draft=True),
                release_payload("v0.6.1"),
                release_payload("v0.6.0", "x.tar.gz"),
            ],
            status=200,
        )

        assert feed.latest_release().version == "v0.6.0"

    @responses.activate
    def test_no_eligible_release(self, feed):
        """Test an empty feed raises FeedUnavailableError."""
        responses.add(responses.GET, RELEASES_URL, json=[], status=200)

        with pytest.raises(FeedUnavailableError, match="no stable release"):
            feed.latest_release()

    @responses.activate
    def test_query_parameters_and_headers(self, feed):
        """Test page size and API headers are sent."""
        responses.add(responses.GET, RELEASES_URL, json=[], status=200)

        feed.list_releases()

        request = responses.calls[0].request
        assert "per_page=30" in request.url
        assert request.headers["Accept"] == "application/vnd.github+json"
        assert "Authorization" not in request.headers

    @responses.activate
    def test_token_header(self, monkeypatch):
        """Test an API token is sent as a bearer token."""
        monkeypatch.delenv(API_URL_ENV_VAR, raising=False)
        responses.add(responses.GET, RELEASES_URL, json=[], status=200)

        GitHubReleaseFeed(token="ghp_secret").list_releases()

        assert responses.calls[0].request.headers["Authorization"] == (
            "Bearer ghp_secret"
        )

    @responses.activate
    def test_http_error(self, feed):
        """Test HTTP errors map to FeedUnavailableError."""
        responses.add(responses.GET, RELEASES_URL, status=403)

        with pytest.raises(FeedUnavailableError) as exc_info:
            feed.latest_release()

        assert exc_info.value.repository == "github/github-mcp-server"
        assert "403" in str(exc_info.value)

    @responses.activate
    def test_invalid_json(self, feed):
        """Test a non-JSON body maps to FeedUnavailableError."""
        responses.add(responses.GET, RELEASES_URL, body="<html>", status=200)

        with pytest.raises(FeedUnavailableError, match="invalid JSON"):
            feed.latest_release()

    @responses.activate
    def test_unexpected_payload(self, feed):
        """Test a JSON object instead of a list is rejected."""
        responses.add(
            responses.GET, RELEASES_URL, json={"message": "Not Found"}, status=200
        )

        with pytest.raises(FeedUnavailableError, match="expected a list"):
            feed.list_releases()

    @responses.activate
    def test_malformed_entry(self, feed):
        """Test a release without a tag is rejected."""
        responses.add(
            responses.GET, RELEASES_URL, json=[{"assets": []}], status=200
        )

        with pytest.raises(FeedUnavailableError, match="malformed"):
            feed.list_releases()

    @pytest.mark.parametrize(
        "payload",
        [
            ["oops"],
            [None],
            [{"tag_name": None, "assets": []}],
            [{"tag_name": "", "assets": []}],
            [{"tag_name": 5, "assets": []}],
            [{"tag_name": "../escape", "assets": []}],
            [{"tag_name": "v1", "assets": ["not-an-asset"]}],
            [{"tag_name": "v1", "assets": [{"name": None, "browser_download_url": "u"}]}],
        ],
    )
    @responses.activate
    def test_malformed_entries_rejected(self, feed, payload):
        """Test entries of the wrong shape map to FeedUnavailableError."""
        responses.add(responses.GET, RELEASES_URL, json=payload, status=200)

        with pytest.raises(FeedUnavailableError, match="malformed"):
            feed.latest_release()

    @responses.activate
    def test_api_url_from_environment(self, monkeypatch):
        """Test the API base URL can be overridden from the environment."""
        monkeypatch.setenv(API_URL_ENV_VAR, "https://ghe.example.com/api/v3/")
        url = "https://ghe.example.com/api/v3/repos/github/github-mcp-server/releases"
        responses.add(
            responses.GET, url, json=[release_payload("v1", "a")], status=200
        )

        feed = GitHubReleaseFeed()

        assert feed.releases_url == url
        assert feed.latest_release().version == "v1"


@pytest.mark.integration
class TestGitHubReleaseFeedIntegration:
    """Queries the real GitHub API."""

    def test_latest_release(self, feed):
        release = feed.latest_release()
        assert release.version
        assert release.assets
