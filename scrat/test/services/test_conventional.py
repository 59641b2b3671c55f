from __future__ import annotations

from pathlib import Path

import pytest

from scrat.core.result import Err, Ok, Result
from scrat.platform.process import ProcessError
from scrat.services import conventional as conventional_mod
from scrat.services.conventional import bumped_version
from scrat.services.semver import SemVer


class FakeCliff:
    def __init__(self, response: Result[str, ProcessError]) -> None:
        self.response = response
        self.calls: list[list[str]] = []

    def __call__(
        self, cmd: list[str], *, cwd: Path, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        del cwd, timeout
        self.calls.append(cmd)
        return self.response


def test_parses_suggested_version(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = FakeCliff(Ok("1.3.0\n"))
    monkeypatch.setattr(conventional_mod, "run_process", fake)

    assert bumped_version(tmp_path) == Ok(SemVer(1, 3, 0))
    assert fake.calls == [["git-cliff", "--bumped-version"]]


def test_accepts_tag_form(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(conventional_mod, "run_process", FakeCliff(Ok("v2.0.0")))

    assert bumped_version(tmp_path) == Ok(SemVer(2, 0, 0))


def test_last_line_is_the_version(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    output = " WARN  git_cliff > no remote configured\n0.4.0\n\n"
    monkeypatch.setattr(conventional_mod, "run_process", FakeCliff(Ok(output)))

    assert bumped_version(tmp_path) == Ok(SemVer(0, 4, 0))


def test_tool_failure(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    error = ProcessError(("git-cliff", "--bumped-version"), 1, "", "no commits found\n")
    monkeypatch.setattr(conventional_mod, "run_process", FakeCliff(Err(error)))

    result = bumped_version(tmp_path)

    assert isinstance(result, Err)
    assert result.error == "git-cliff could not compute the next version: no commits found"


@pytest.mark.parametrize("output", ["", "next\n", "1.2\n"])
def test_invalid_output(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, output: str) -> None:
    monkeypatch.setattr(conventional_mod, "run_process", FakeCliff(Ok(output)))

    result = bumped_version(tmp_path)

    assert isinstance(result, Err)
    assert "invalid version" in result.error
