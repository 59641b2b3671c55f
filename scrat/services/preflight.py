# SPDX-License-Identifier: MIT
"""Preflight checks run before a ship changes anything.

Each check returns a ``CheckResult``; the report passes when no check is an
error. Warnings are shown but do not block the release.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto

from scrat.core.config import Config
from scrat.core.result import Err
from scrat.services.git import GitRepository

__all__ = ["CheckResult", "CheckStatus", "PreflightReport", "required_tools", "run_preflight"]

logger = logging.getLogger(__name__)


class CheckStatus(Enum):
    """Status of a check result."""

    OK = auto()
    """Check passed."""

    WARNING = auto()
    """Check passed with a caveat (e.g. no origin remote)."""

    ERROR = auto()
    """Check failed; the release must not start."""


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Result of a single check.

    Attributes:
        name: Short label for what was checked (e.g. "Working tree")
        status: Whether the check passed, warned, or failed
        message: Human-readable result message
        hint: Optional fix command or URL
    """

    name: str
    status: CheckStatus
    message: str
    hint: str | None = None

    @property
    def ok(self) -> bool:
        """Return True if check passed (OK or WARNING)."""
        return self.status != CheckStatus.ERROR

    @property
    def is_warning(self) -> bool:
        return self.status == CheckStatus.WARNING

    @classmethod
    def success(cls, name: str, message: str) -> CheckResult:
        return cls(name=name, status=CheckStatus.OK, message=message)

    @classmethod
    def warning(cls, name: str, message: str, hint: str | None = None) -> CheckResult:
        return cls(name=name, status=CheckStatus.WARNING, message=message, hint=hint)

    @classmethod
    def error(cls, name: str, message: str, hint: str | None = None) -> CheckResult:
        return cls(name=name, status=CheckStatus.ERROR, message=message, hint=hint)


@dataclass(frozen=True, slots=True)
class PreflightReport:
    checks: tuple[CheckResult, ...]

    @property
    def all_passed(self) -> bool:
        return all(c.ok for c in self.checks)

    @property
    def failures(self) -> list[CheckResult]:
        return [c for c in self.checks if not c.ok]


def _check_git_repo(repo: GitRepository) -> CheckResult:
    if repo.is_inside_repo():
        return CheckResult.success("Git repository", "Inside a git repository")
    return CheckResult.error("Git repository", "Not inside a git repository", hint="git init")


def _check_clean_tree(repo: GitRepository) -> CheckResult:
    clean = repo.is_clean()
    if isinstance(clean, Err):
        return CheckResult.error("Working tree", f"Failed to check: {clean.error}")
    if clean.value:
        return CheckResult.success("Working tree", "Clean working tree")
    return CheckResult.error(
        "Working tree",
        "Uncommitted changes in working tree",
        hint="commit or stash your changes",
    )


def _check_release_branch(repo: GitRepository, expected: str | None) -> CheckResult:
    current = repo.current_branch()
    if current is None:
        return CheckResult.error("Release branch", "Detached HEAD, not on any branch")

    if expected is not None:
        if current == expected:
            return CheckResult.success(
                "Release branch", f"On configured release branch '{current}'"
            )
        return CheckResult.error("Release branch", f"On '{current}', expected '{expected}'")

    detected = repo.detect_release_branch()
    if detected is None:
        return CheckResult.error(
            "Release branch",
            f"On '{current}', no main/master branch found",
            hint="set project.release_branch in .scrat.toml",
        )
    if current == detected:
        return CheckResult.success("Release branch", f"On release branch '{current}'")
    return CheckResult.error("Release branch", f"On '{current}', expected '{detected}'")


def _check_remote_sync(repo: GitRepository) -> CheckResult:
    if repo.remote_url() is None:
        return CheckResult.warning(
            "Remote sync",
            "No 'origin' remote; push and release will fail",
            hint="git remote add origin <url>",
        )
    in_sync = repo.is_remote_in_sync()
    if isinstance(in_sync, Err):
        return CheckResult.error("Remote sync", f"Failed to check: {in_sync.error}")
    if in_sync.value:
        return CheckResult.success("Remote sync", "Local branch is in sync with remote")
    return CheckResult.error(
        "Remote sync",
        "Local branch is out of sync with remote (pull or push needed)",
    )


def _check_tools(required: list[str], which: Callable[[str], str | None]) -> CheckResult:
    missing = [tool for tool in required if which(tool) is None]
    if missing:
        return CheckResult.error(
            "Required tools",
            f"Missing: {', '.join(missing)}",
            hint="install the missing tools and make sure they are on PATH",
        )
    return CheckResult.success("Required tools", f"Found: {', '.join(required)}")


def required_tools(config: Config, *, release: bool, conventional: bool = False) -> list[str]:
    tools = ["git"]
    if release and config.release.github_release:
        tools.append("gh")
        if config.release.render_notes:
            tools.append("git-cliff")
    if conventional and "git-cliff" not in tools:
        tools.append("git-cliff")
    return tools


def run_preflight(
    repo: GitRepository,
    config: Config,
    *,
    release: bool = True,
    conventional: bool = False,
    which: Callable[[str], str | None] = shutil.which,
) -> PreflightReport:
    """Run every check; stops after the first one if not inside a git repository."""
    repo_check = _check_git_repo(repo)
    if not repo_check.ok:
        return PreflightReport(checks=(repo_check,))

    checks = (
        repo_check,
        _check_clean_tree(repo),
        _check_release_branch(repo, config.project.release_branch),
        _check_remote_sync(repo),
        _check_tools(required_tools(config, release=release, conventional=conventional), which),
    )
    report = PreflightReport(checks=checks)
    logger.debug("preflight complete: all_passed=%s checks=%d", report.all_passed, len(checks))
    return report
