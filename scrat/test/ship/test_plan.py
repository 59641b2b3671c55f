from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from scrat.core.config import Config, ProjectConfig
from scrat.core.result import Err, Ok, Result
from scrat.platform.process import ProcessError
from scrat.services import conventional as conventional_mod
from scrat.ship.errors import PhaseFailed, PreflightFailed
from scrat.ship.model import ShipOptions, ShipPhase
from scrat.ship.plan import plan_ship


@dataclass
class FakeRepo:
    inside: bool = True
    clean: bool = True
    branch: str | None = "main"
    remote: str | None = "https://github.com/acme/widget.git"
    in_sync: bool = True
    tags: list[str] = field(default_factory=lambda: ["v1.2.0", "v1.1.9", "v1.0.0"])

    def is_inside_repo(self) -> bool:
        return self.inside

    def is_clean(self) -> Result[bool, str]:
        return Ok(self.clean)

    def current_branch(self) -> str | None:
        return self.branch

    def detect_release_branch(self) -> str | None:
        return "main"

    def remote_url(self) -> str | None:
        return self.remote

    def is_remote_in_sync(self) -> Result[bool, str]:
        return Ok(self.in_sync)

    def version_tags(self) -> list[str]:
        return self.tags


def _all_tools(name: str) -> str | None:
    return f"/usr/bin/{name}"


def _plan(
    tmp_path: Path,
    repo: FakeRepo,
    options: ShipOptions | None = None,
    config: Config | None = None,
):
    return plan_ship(
        tmp_path,
        config or Config(),
        options or ShipOptions(),
        repo=repo,  # type: ignore[arg-type]
        which=_all_tools,
    )


def test_default_is_patch_bump(tmp_path: Path) -> None:
    result = _plan(tmp_path, FakeRepo())

    assert isinstance(result, Ok)
    ready = result.value
    assert str(ready.version.previous) == "1.2.0"
    assert str(ready.version.next) == "1.2.1"
    assert ready.version.strategy == "patch"
    assert ready.has_previous_tag
    assert ready.warnings == ()


def test_minor_bump(tmp_path: Path) -> None:
    result = _plan(tmp_path, FakeRepo(), ShipOptions(bump="minor"))

    assert isinstance(result, Ok)
    assert str(result.value.version.next) == "1.3.0"


def test_explicit_version(tmp_path: Path) -> None:
    result = _plan(tmp_path, FakeRepo(), ShipOptions(explicit_version="2.0.0"))

    assert isinstance(result, Ok)
    assert str(result.value.version.next) == "2.0.0"
    assert result.value.version.strategy == "explicit"


def test_explicit_version_must_increase(tmp_path: Path) -> None:
    result = _plan(tmp_path, FakeRepo(), ShipOptions(explicit_version="1.2.0"))

    assert isinstance(result, Err)
    assert isinstance(result.error, PhaseFailed)
    assert result.error.phase is ShipPhase.VERSION


def test_first_release_starts_from_zero(tmp_path: Path) -> None:
    result = _plan(tmp_path, FakeRepo(tags=[]))

    assert isinstance(result, Ok)
    assert str(result.value.version.previous) == "0.0.0"
    assert str(result.value.version.next) == "0.0.1"
    assert not result.value.has_previous_tag


def test_dirty_tree_fails_preflight(tmp_path: Path) -> None:
    result = _plan(tmp_path, FakeRepo(clean=False, in_sync=False))

    assert isinstance(result, Err)
    assert isinstance(result.error, PreflightFailed)
    assert result.error.messages == (
        "Uncommitted changes in working tree",
        "Local branch is out of sync with remote (pull or push needed)",
    )
    assert str(result.error).startswith("preflight checks failed: Uncommitted changes")


def test_wrong_branch_fails_preflight(tmp_path: Path) -> None:
    config = Config(project=ProjectConfig(release_branch="release"))
    result = _plan(tmp_path, FakeRepo(), config=config)

    assert isinstance(result, Err)
    assert isinstance(result.error, PreflightFailed)
    assert result.error.messages == ("On 'main', expected 'release'",)


def test_missing_remote_is_a_warning(tmp_path: Path) -> None:
    result = _plan(tmp_path, FakeRepo(remote=None))

    assert isinstance(result, Ok)
    assert result.value.warnings == ("No 'origin' remote; push and release will fail",)


def test_missing_tools_fail_preflight(tmp_path: Path) -> None:
    result = plan_ship(
        tmp_path,
        Config(),
        ShipOptions(),
        repo=FakeRepo(),  # type: ignore[arg-type]
        which=lambda name: None if name == "gh" else f"/usr/bin/{name}",
    )

    assert isinstance(result, Err)
    assert isinstance(result.error, PreflightFailed)
    assert result.error.messages == ("Missing: gh",)


def test_no_release_does_not_need_gh(tmp_path: Path) -> None:
    result = plan_ship(
        tmp_path,
        Config(),
        ShipOptions(no_release=True),
        repo=FakeRepo(),  # type: ignore[arg-type]
        which=lambda name: "/usr/bin/git" if name == "git" else None,
    )

    assert isinstance(result, Ok)


class FakeCliff:
    def __init__(self, response: Result[str, ProcessError]) -> None:
        self.response = response
        self.calls = 0

    def __call__(
        self, cmd: list[str], *, cwd: Path, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        del cmd, cwd, timeout
        self.calls += 1
        return self.response


def test_conventional_version(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = FakeCliff(Ok("1.3.0\n"))
    monkeypatch.setattr(conventional_mod, "run_process", fake)

    result = _plan(tmp_path, FakeRepo(), ShipOptions(conventional=True))

    assert isinstance(result, Ok)
    assert str(result.value.version.previous) == "1.2.0"
    assert str(result.value.version.next) == "1.3.0"
    assert result.value.version.strategy == "conventional"
    assert fake.calls == 1


def test_explicit_version_skips_git_cliff(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = FakeCliff(Ok("1.3.0\n"))
    monkeypatch.setattr(conventional_mod, "run_process", fake)

    result = _plan(tmp_path, FakeRepo(), ShipOptions(explicit_version="2.0.0", conventional=True))

    assert isinstance(result, Ok)
    assert str(result.value.version.next) == "2.0.0"
    assert fake.calls == 0


def test_conventional_without_releasable_commits(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setattr(conventional_mod, "run_process", FakeCliff(Ok("1.2.0\n")))

    result = _plan(tmp_path, FakeRepo(), ShipOptions(conventional=True))

    assert isinstance(result, Err)
    assert isinstance(result.error, PhaseFailed)
    assert result.error.phase is ShipPhase.VERSION
    assert "not greater than the latest release" in result.error.message


def test_conventional_tool_failure(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    error = ProcessError(("git-cliff", "--bumped-version"), 1, "", "bad config")
    monkeypatch.setattr(conventional_mod, "run_process", FakeCliff(Err(error)))

    result = _plan(tmp_path, FakeRepo(), ShipOptions(conventional=True))

    assert isinstance(result, Err)
    assert isinstance(result.error, PhaseFailed)
    assert result.error.phase is ShipPhase.VERSION
    assert "bad config" in result.error.message


def test_conventional_requires_git_cliff(tmp_path: Path) -> None:
    result = plan_ship(
        tmp_path,
        Config(),
        ShipOptions(conventional=True, no_release=True),
        repo=FakeRepo(),  # type: ignore[arg-type]
        which=lambda name: None if name == "git-cliff" else f"/usr/bin/{name}",
    )

    assert isinstance(result, Err)
    assert isinstance(result.error, PreflightFailed)
    assert result.error.messages == ("Missing: git-cliff",)
