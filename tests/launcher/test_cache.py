"""
Unit tests for the versioned binary cache.

Tests cover:
- Fresh install into a version directory
- Memoized fast path
- Pruning of stale versions
- Recovery when the cached binary disappears
- Error propagation from download and extraction
"""

import hashlib
import os
import sys
from unittest.mock import patch

import pytest
import responses

from github_mcp_launcher.core.exceptions import (
    AssetNotFoundError,
    CacheLockTimeout,
    ChecksumError,
    DecompressError,
    DirectoryCreateError,
    DownloadError,
    FeedUnavailableError,
    MakeExecutableError,
)
from github_mcp_launcher.core.filesystem import make_executable
from github_mcp_launcher.core.locking import LockManager
from github_mcp_launcher.launcher.cache import VersionedBinaryCache
from github_mcp_launcher.release.feed import Asset, Release
from tests.fixtures.releases import (
    BINARY_CONTENT,
    StubFeed,
    asset_url,
    make_release,
    make_tar_gz,
    make_zip,
)

LINUX_ASSET = "github-mcp-server_Linux_x86_64.tar.gz"


def add_asset(version, name, body):
    responses.add(responses.GET, asset_url(version, name), body=body, status=200)


class TestResolve:
    """Tests for VersionedBinaryCache.resolve()."""

    @responses.activate
    def test_fresh_install(self, tmp_path, stub_feed, linux_x64, linux_archive):
        """Test the binary is downloaded into its version directory."""
        add_asset("v1.2.0", LINUX_ASSET, linux_archive)
        cache = VersionedBinaryCache(tmp_path, feed=stub_feed)

        binary = cache.resolve(linux_x64)

        assert binary == tmp_path / "github-mcp-server-v1.2.0" / "github-mcp-server"
        assert binary.read_bytes() == BINARY_CONTENT
        if sys.platform != "win32":
            assert os.access(binary, os.X_OK)
        assert cache.cached_path == binary
        assert cache.installed_versions() == ["github-mcp-server-v1.2.0"]

    @responses.activate
    def test_archive_extras_are_kept(self, tmp_path, stub_feed, linux_x64, linux_archive):
        """Test other archive members land beside the binary."""
        add_asset("v1.2.0", LINUX_ASSET, linux_archive)

        VersionedBinaryCache(tmp_path, feed=stub_feed).resolve(linux_x64)

        assert (tmp_path / "github-mcp-server-v1.2.0" / "README.md").exists()

    @responses.activate
    def test_memoized_path_skips_feed(self, tmp_path, stub_feed, linux_x64, linux_archive):
        """Test a second resolve makes no feed or network calls."""
        add_asset("v1.2.0", LINUX_ASSET, linux_archive)
        cache = VersionedBinaryCache(tmp_path, feed=stub_feed)

        first = cache.resolve(linux_x64)
        second = cache.resolve(linux_x64)

        assert first == second
        assert stub_feed.calls == 1
        assert len(responses.calls) == 1

    @responses.activate
    def test_existing_binary_not_downloaded(self, tmp_path, stub_feed, linux_x64):
        """Test an already extracted binary is reused without a download."""
        version_dir = tmp_path / "github-mcp-server-v1.2.0"
        version_dir.mkdir()
        (version_dir / "github-mcp-server").write_bytes(b"existing")

        binary = VersionedBinaryCache(tmp_path, feed=stub_feed).resolve(linux_x64)

        assert binary.read_bytes() == b"existing"
        assert len(responses.calls) == 0
        assert stub_feed.calls == 1

    @responses.activate
    def test_deleted_binary_triggers_resolution(
        self, tmp_path, stub_feed, linux_x64, linux_archive
    ):
        """Test a memoized path that vanished is resolved again."""
        add_asset("v1.2.0", LINUX_ASSET, linux_archive)
        cache = VersionedBinaryCache(tmp_path, feed=stub_feed)
        binary = cache.resolve(linux_x64)

        binary.unlink()
        again = cache.resolve(linux_x64)

        assert again == binary
        assert again.exists()
        assert stub_feed.calls == 2
        assert len(responses.calls) == 2

    @responses.activate
    def test_invalidate(self, tmp_path, stub_feed, linux_x64, linux_archive):
        """Test invalidate forces a feed query."""
        add_asset("v1.2.0", LINUX_ASSET, linux_archive)
        cache = VersionedBinaryCache(tmp_path, feed=stub_feed)
        cache.resolve(linux_x64)

        cache.invalidate()
        assert cache.cached_path is None
        cache.resolve(linux_x64)

        assert stub_feed.calls == 2
        assert len(responses.calls) == 1

    @responses.activate
    def test_windows_zip(self, tmp_path, windows_x64):
        """Test Windows assets are zip files with an .exe binary."""
        name = "github-mcp-server_Windows_x86_64.zip"
        add_asset("v1.2.0", name, make_zip({"github-mcp-server.exe": b"MZ"}))
        feed = StubFeed(make_release("v1.2.0", name))

        binary = VersionedBinaryCache(tmp_path, feed=feed).resolve(windows_x64)

        assert binary == tmp_path / "github-mcp-server-v1.2.0" / "github-mcp-server.exe"
        assert binary.read_bytes() == b"MZ"

    @responses.activate
    def test_without_locking(self, tmp_path, stub_feed, linux_x64, linux_archive):
        """Test resolution works with locking disabled and leaves no lock file."""
        add_asset("v1.2.0", LINUX_ASSET, linux_archive)
        cache = VersionedBinaryCache(tmp_path, feed=stub_feed, locking=False)

        cache.resolve(linux_x64)

        assert cache.lock_manager is None
        assert not list(tmp_path.glob(".*.lock"))

    @responses.activate
    def test_lock_timeout(self, tmp_path, stub_feed, linux_x64):
        """Test a held cache lock surfaces as CacheLockTimeout."""
        holder = LockManager(tmp_path)
        cache = VersionedBinaryCache(tmp_path, feed=stub_feed, lock_timeout=0.1)

        with holder.cache_lock("github-mcp-server", timeout=5):
            with pytest.raises(CacheLockTimeout):
                cache.resolve(linux_x64)

        assert cache.cached_path is None


class TestPruning:
    """Tests for stale version pruning."""

    @responses.activate
    def test_stale_versions_removed(self, tmp_path, stub_feed, linux_x64, linux_archive):
        """Test exactly one version directory remains after resolution."""
        add_asset("v1.2.0", LINUX_ASSET, linux_archive)
        stale = tmp_path / "github-mcp-server-v1.1.0"
        stale.mkdir()
        (stale / "github-mcp-server").write_bytes(b"old")
        (tmp_path / "github-mcp-server-v0.9.0").mkdir()

        cache = VersionedBinaryCache(tmp_path, feed=stub_feed)
        cache.resolve(linux_x64)

        assert cache.installed_versions() == ["github-mcp-server-v1.2.0"]

    @responses.activate
    def test_unrelated_entries_kept(self, tmp_path, stub_feed, linux_x64, linux_archive):
        """Test pruning only touches version directories."""
        add_asset("v1.2.0", LINUX_ASSET, linux_archive)
        (tmp_path / "wrappers").mkdir()
        (tmp_path / "settings.yaml").write_text("settings: {}\n")

        VersionedBinaryCache(tmp_path, feed=stub_feed).resolve(linux_x64)

        assert (tmp_path / "wrappers").is_dir()
        assert (tmp_path / "settings.yaml").exists()

    @responses.activate
    def test_prune_failure_does_not_fail_resolution(
        self, tmp_path, stub_feed, linux_x64, linux_archive, caplog
    ):
        """Test a stale directory that cannot be removed is only logged."""
        add_asset("v1.2.0", LINUX_ASSET, linux_archive)
        (tmp_path / "github-mcp-server-v1.1.0").mkdir()
        cache = VersionedBinaryCache(tmp_path, feed=stub_feed)

        with patch(
            "github_mcp_launcher.launcher.cache.remove_tree",
            side_effect=PermissionError("in use"),
        ):
            binary = cache.resolve(linux_x64)

        assert binary.exists()
        assert (tmp_path / "github-mcp-server-v1.1.0").exists()
        assert "Failed to remove stale version" in caplog.text

    def test_prune_returns_removed(self, tmp_path):
        """Test prune_stale_versions reports what it removed."""
        (tmp_path / "github-mcp-server-v1").mkdir()
        (tmp_path / "github-mcp-server-v2").mkdir()
        cache = VersionedBinaryCache(tmp_path, feed=StubFeed())

        removed = cache.prune_stale_versions("github-mcp-server-v2")

        assert removed == [tmp_path / "github-mcp-server-v1"]

    def test_prune_missing_root(self, tmp_path):
        """Test pruning a missing cache root is harmless."""
        cache = VersionedBinaryCache(tmp_path / "missing", feed=StubFeed())
        assert cache.prune_stale_versions("github-mcp-server-v1") == []
        assert cache.installed_versions() == []


class TestFailedInstall:
    """Tests that a failed install never leaves a binary that later resolves."""

    @responses.activate
    def test_corrupt_member_not_reused(self, tmp_path, windows_x64):
        """Test a partially extracted binary is not accepted by the next resolve."""
        name = "github-mcp-server_Windows_x86_64.zip"
        good = make_zip({"github-mcp-server.exe": b"MZ" * 512})
        data_at = good.find(b"MZMZ")
        corrupt = good[:data_at] + b"XX" + good[data_at + 2 :]
        add_asset("v1.2.0", name, corrupt)
        add_asset("v1.2.0", name, good)
        (tmp_path / "github-mcp-server-v1.1.0").mkdir()
        cache = VersionedBinaryCache(tmp_path, feed=StubFeed(make_release("v1.2.0", name)))

        with pytest.raises(DecompressError):
            cache.resolve(windows_x64)

        binary = tmp_path / "github-mcp-server-v1.2.0" / "github-mcp-server.exe"
        assert not binary.exists()
        assert (tmp_path / "github-mcp-server-v1.1.0").exists()
        assert not list(tmp_path.glob(".github-mcp-server-staging-*"))

        assert cache.resolve(windows_x64) == binary
        assert binary.read_bytes() == b"MZ" * 512
        assert cache.installed_versions() == ["github-mcp-server-v1.2.0"]

    @responses.activate
    def test_chmod_failure_not_reused(self, tmp_path, stub_feed, linux_x64, linux_archive):
        """Test a binary that could not be made executable is installed again."""
        add_asset("v1.2.0", LINUX_ASSET, linux_archive)
        (tmp_path / "github-mcp-server-v1.1.0").mkdir()
        cache = VersionedBinaryCache(tmp_path, feed=stub_feed)
        failures = [MakeExecutableError("github-mcp-server", "permission denied")]

        def flaky_make_executable(path):
            if failures:
                raise failures.pop()
            make_executable(path)

        with patch(
            "github_mcp_launcher.launcher.cache.make_executable",
            side_effect=flaky_make_executable,
        ):
            with pytest.raises(MakeExecutableError):
                cache.resolve(linux_x64)

            binary = tmp_path / "github-mcp-server-v1.2.0" / "github-mcp-server"
            assert not binary.exists()
            assert (tmp_path / "github-mcp-server-v1.1.0").exists()
            assert cache.cached_path is None

            assert cache.resolve(linux_x64) == binary

        assert binary.read_bytes() == BINARY_CONTENT
        if sys.platform != "win32":
            assert os.access(binary, os.X_OK)
        assert len(responses.calls) == 2


class TestResolveErrors:
    """Tests for error propagation."""

    def test_feed_unavailable(self, tmp_path, linux_x64):
        """Test feed failures propagate and leave the cache untouched."""
        cache = VersionedBinaryCache(tmp_path, feed=StubFeed())

        with pytest.raises(FeedUnavailableError):
            cache.resolve(linux_x64)

        assert list(tmp_path.iterdir()) == []

    def test_asset_missing(self, tmp_path, windows_x64, stub_feed):
        """Test a release without the platform asset raises."""
        with pytest.raises(AssetNotFoundError):
            VersionedBinaryCache(tmp_path, feed=stub_feed).resolve(windows_x64)

    @responses.activate
    def test_download_failure(self, tmp_path, stub_feed, linux_x64):
        """Test a failed download raises DownloadError and keeps old versions."""
        responses.add(responses.GET, asset_url("v1.2.0", LINUX_ASSET), status=500)
        (tmp_path / "github-mcp-server-v1.1.0").mkdir()

        with pytest.raises(DownloadError):
            VersionedBinaryCache(tmp_path, feed=stub_feed).resolve(linux_x64)

        assert (tmp_path / "github-mcp-server-v1.1.0").exists()
        assert len(responses.calls) == 1

    @responses.activate
    def test_published_digest_verified(self, tmp_path, linux_x64, linux_archive):
        """Test a feed digest that does not match the download fails the install."""
        add_asset("v1.2.0", LINUX_ASSET, linux_archive)
        feed = StubFeed(
            Release(
                version="v1.2.0",
                assets=(
                    Asset(
                        name=LINUX_ASSET,
                        download_url=asset_url("v1.2.0", LINUX_ASSET),
                        sha256="0" * 64,
                    ),
                ),
            )
        )

        with pytest.raises(ChecksumError):
            VersionedBinaryCache(tmp_path, feed=feed).resolve(linux_x64)

        assert not (tmp_path / "github-mcp-server-v1.2.0" / "github-mcp-server").exists()

    @responses.activate
    def test_matching_digest(self, tmp_path, linux_x64, linux_archive):
        add_asset("v1.2.0", LINUX_ASSET, linux_archive)
        asset = Asset(
            name=LINUX_ASSET,
            download_url=asset_url("v1.2.0", LINUX_ASSET),
            sha256=hashlib.sha256(linux_archive).hexdigest(),
        )
        feed = StubFeed(Release(version="v1.2.0", assets=(asset,)))

        binary = VersionedBinaryCache(tmp_path, feed=feed).resolve(linux_x64)

        assert binary.exists()

    @responses.activate
    def test_corrupt_archive(self, tmp_path, stub_feed, linux_x64):
        """Test a corrupt archive raises DecompressError."""
        add_asset("v1.2.0", LINUX_ASSET, b"not an archive")

        with pytest.raises(DecompressError):
            VersionedBinaryCache(tmp_path, feed=stub_feed).resolve(linux_x64)

    @responses.activate
    def test_archive_without_binary(self, tmp_path, stub_feed, linux_x64):
        """Test an archive lacking the binary raises DecompressError."""
        add_asset("v1.2.0", LINUX_ASSET, make_tar_gz({"README.md": b"docs"}))

        with pytest.raises(DecompressError, match="was not found"):
            VersionedBinaryCache(tmp_path, feed=stub_feed).resolve(linux_x64)

    def test_directory_create_failure(self, tmp_path, stub_feed, linux_x64):
        """Test an uncreatable cache root raises DirectoryCreateError."""
        blocker = tmp_path / "file"
        blocker.write_text("x")

        with pytest.raises(DirectoryCreateError):
            VersionedBinaryCache(blocker / "cache", feed=stub_feed).resolve(linux_x64)
