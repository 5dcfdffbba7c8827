"""
Doctor command for diagnosing launcher issues.

Reports what each acquisition strategy would find on this machine without
touching the network: the detected platform, where the token comes from,
the wrapper script and its interpreter, the npm package, and cached versions.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from github_mcp_launcher.cli.utils import load_host_settings
from github_mcp_launcher.core.exceptions import LauncherError, MissingCredentialError
from github_mcp_launcher.core.platform import Platform, detect_platform
from github_mcp_launcher.launcher.cache import VersionedBinaryCache
from github_mcp_launcher.launcher.credentials import CredentialResolver
from github_mcp_launcher.launcher.npm import NpmPackageLocator
from github_mcp_launcher.launcher.wrapper import (
    Interpreter,
    WrapperLocator,
    prerequisites_satisfied,
)
from github_mcp_launcher.release.assets import expected_asset_name

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """Result of a health check."""

    name: str
    passed: bool
    message: str
    fix_command: Optional[str] = None


class LauncherChecker:
    """Check launcher environment health."""

    def __init__(
        self,
        work_dir: Path,
        credentials: Optional[CredentialResolver] = None,
        npm_locator: Optional[NpmPackageLocator] = None,
        probe: Callable[[Interpreter], bool] = prerequisites_satisfied,
    ):
        self.work_dir = Path(work_dir)
        self.credentials = credentials or CredentialResolver()
        self.npm_locator = npm_locator or NpmPackageLocator()
        self.probe = probe

    def check_platform(self) -> CheckResult:
        try:
            platform = detect_platform()
        except LauncherError as e:
            return CheckResult(name="Platform", passed=False, message=str(e))
        return CheckResult(
            name="Platform",
            passed=True,
            message=f"{platform} (asset {expected_asset_name(platform)})",
        )

    def check_credentials(self, settings) -> CheckResult:
        try:
            _, source = self.credentials.resolve_with_source(settings)
        except MissingCredentialError:
            return CheckResult(
                name="Token",
                passed=False,
                message="No GitHub token in settings or environment",
                fix_command="export GITHUB_TOKEN=$(gh auth token)",
            )
        return CheckResult(name="Token", passed=True, message=f"Found in {source}")

    def check_wrapper(self, platform: Platform) -> CheckResult:
        wrapper = WrapperLocator(self.work_dir).locate(platform)
        if wrapper is None:
            return CheckResult(
                name="Wrapper",
                passed=False,
                message=f"No wrapper script under {self.work_dir / 'wrappers'}",
            )
        if not self.probe(wrapper.interpreter):
            return CheckResult(
                name="Wrapper",
                passed=False,
                message=f"{wrapper.path} found but {wrapper.interpreter.dependency} is not available",
                fix_command=f"Install {wrapper.interpreter.dependency}",
            )
        return CheckResult(
            name="Wrapper",
            passed=True,
            message=f"{wrapper.path} ({wrapper.interpreter.executable})",
        )

    def check_npm_package(self) -> CheckResult:
        entry_point = self.npm_locator.locate()
        if entry_point is None:
            return CheckResult(
                name="npm package",
                passed=False,
                message="GitHub MCP server package not installed globally",
                fix_command="npm install -g @modelcontextprotocol/server-github",
            )
        if not self.probe(Interpreter.NODE):
            return CheckResult(
                name="npm package",
                passed=False,
                message=f"{entry_point} found but {Interpreter.NODE.dependency} is not available",
                fix_command=f"Install {Interpreter.NODE.dependency}",
            )
        return CheckResult(name="npm package", passed=True, message=str(entry_point))

    def check_cache(self) -> CheckResult:
        versions = VersionedBinaryCache(self.work_dir, locking=False).installed_versions()
        if not versions:
            return CheckResult(
                name="Cache",
                passed=False,
                message="No cached version (will download on first resolve)",
            )
        return CheckResult(name="Cache", passed=True, message=", ".join(versions))

    def run_all(self, settings) -> List[CheckResult]:
        results = [self.check_platform(), self.check_credentials(settings)]
        try:
            platform = detect_platform()
        except LauncherError:
            platform = None
        if platform is not None:
            results.append(self.check_wrapper(platform))
        results.append(self.check_npm_package())
        results.append(self.check_cache())
        return results


def run(args) -> int:
    """
    Run the doctor command.

    Returns:
        0 if a launch strategy is usable, 1 otherwise
    """
    settings = load_host_settings(args)
    checker = LauncherChecker(Path(args.work_dir).resolve())
    results = checker.run_all(settings)

    for result in results:
        status = "OK " if result.passed else "-- "
        print(f"[{status}] {result.name}: {result.message}")
        if not result.passed and result.fix_command:
            print(f"       fix: {result.fix_command}")

    return 0 if any_strategy_usable(results) else 1


def any_strategy_usable(results: List[CheckResult]) -> bool:
    """Whether any launch strategy would succeed with these results."""
    passed = {r.name for r in results if r.passed}
    if "Wrapper" in passed:
        return True
    if "Token" not in passed:
        return False
    return "Platform" in passed or "npm package" in passed
