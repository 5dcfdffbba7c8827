"""
Pytest configuration and shared fixtures for github-mcp-launcher tests.
"""

import pytest

# Import test fixtures to make them available to all tests
# ruff: noqa: F401
from tests.fixtures.releases import (
    linux_x64,
    windows_x64,
    linux_archive,
    stub_feed,
)

from github_mcp_launcher.core.platform import clear_platform_cache


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


@pytest.fixture(autouse=True)
def _reset_platform_cache():
    """Make every test detect the platform afresh."""
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture
def clean_token_env(monkeypatch):
    """Remove GitHub token variables from the environment."""
    for name in ("GITHUB_TOKEN", "GITHUB_PERSONAL_ACCESS_TOKEN"):
        monkeypatch.delenv(name, raising=False)
