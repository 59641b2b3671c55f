"""Tests for scrat.platform.process."""

from __future__ import annotations

import sys
import time
from pathlib import Path

import pytest

from scrat.core.result import Err, Ok
from scrat.platform.process import ProcessError, run, run_shell, start_shell

PY = sys.executable


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(
            command=("git", "status"),
            returncode=1,
            stdout="",
            stderr="fatal: not a git repository",
        )
        assert str(error) == "git status failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("gh", "release", "create", "v1.0.0", "--draft"),
            returncode=1,
            stdout="",
            stderr="error",
        )
        assert str(error) == "gh release create ... failed (exit 1)"

    def test_str_by_kind(self) -> None:
        spawn = ProcessError(("git-cliff",), -1, "", "No such file", kind="spawn")
        timeout = ProcessError(("git", "push"), -1, "", "", kind="timeout")
        assert str(spawn) == "git-cliff could not be started: No such file"
        assert str(timeout) == "git push timed out"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert result.value.strip() == "hello"

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run(
            [PY, "-c", "import sys; sys.stderr.write('error msg'); sys.exit(42)"], cwd=tmp_path
        )

        assert isinstance(result, Err)
        assert result.error.returncode == 42
        assert result.error.kind == "exit"
        assert "error msg" in result.error.stderr

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert result.error.kind == "spawn"

    def test_timeout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "import time; time.sleep(10)"], cwd=tmp_path, timeout=0.1)

        assert isinstance(result, Err)
        assert result.error.kind == "timeout"
        assert "timed out" in result.error.stderr.lower()

    def test_input_text_is_sent_to_stdin(self, tmp_path: Path) -> None:
        result = run(
            [PY, "-c", "import sys; print(sys.stdin.read().upper())"],
            cwd=tmp_path,
            input_text="context",
        )

        assert isinstance(result, Ok)
        assert result.value.strip() == "CONTEXT"


class TestShell:
    def test_non_zero_exit_is_ok_result(self, tmp_path: Path) -> None:
        result = run_shell("echo out; echo err >&2; exit 7", tmp_path)

        assert isinstance(result, Ok)
        done = result.value
        assert not done.ok
        assert done.returncode == 7
        assert done.stdout.strip() == "out"
        assert done.stderr.strip() == "err"
        assert not done.timed_out

    def test_uses_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "marker.txt").write_text("x")

        result = run_shell("ls", tmp_path)

        assert isinstance(result, Ok)
        assert "marker.txt" in result.value.stdout

    def test_input_text(self, tmp_path: Path) -> None:
        result = run_shell("cat", tmp_path, input_text='{"a": 1}')

        assert isinstance(result, Ok)
        assert result.value.stdout == '{"a": 1}'

    def test_timeout_kills(self, tmp_path: Path) -> None:
        result = run_shell("sleep 5", tmp_path, timeout=0.2)

        assert isinstance(result, Ok)
        assert result.value.timed_out
        assert "timed out" in result.value.stderr
        assert result.value.duration < 5

    def test_timeout_kills_compound_command(self, tmp_path: Path) -> None:
        result = run_shell("sleep 5; echo x", tmp_path, timeout=0.3)

        assert isinstance(result, Ok)
        assert result.value.timed_out
        assert result.value.duration < 2
        assert "x" not in result.value.stdout

    def test_finished_after_exit(self, tmp_path: Path) -> None:
        started = start_shell("echo fast", tmp_path)

        assert isinstance(started, Ok)
        proc = started.value
        deadline = time.monotonic() + 5
        while not proc.finished and time.monotonic() < deadline:
            time.sleep(0.01)
        assert proc.finished
        assert proc.wait(timeout=1).stdout == "fast\n"

    def test_finished_false_while_running(self, tmp_path: Path) -> None:
        started = start_shell("sleep 5", tmp_path)

        assert isinstance(started, Ok)
        assert not started.value.finished
        assert started.value.wait(timeout=0.1).timed_out

    def test_missing_cwd_is_spawn_error(self, tmp_path: Path) -> None:
        result = start_shell("echo hi", tmp_path / "missing")

        assert isinstance(result, Err)
        assert result.error.kind == "spawn"

    def test_stdin_is_closed_without_pipe(self, tmp_path: Path) -> None:
        started = start_shell("cat", tmp_path)

        assert isinstance(started, Ok)
        done = started.value.wait(timeout=5)
        assert done.ok
        assert done.stdout == ""
