"""Subprocess execution with Result-based error handling.

Two flavors:
- ``run``: an argv command (git, gh, git-cliff); Ok(stdout) or Err on
  non-zero exit.
- ``start_shell`` / ``run_shell``: a user-supplied shell command line (hooks,
  test and publish commands). These return the completed ``ShellResult``
  whatever the exit code; only a failure to spawn is an Err.

Usage:
    match run_shell("make test", cwd=root):
        case Ok(done) if done.ok:
            print(done.stdout)
        case Ok(done):
            print(f"exit {done.returncode}: {done.stderr}")
        case Err(error):
            print(f"could not start: {error.stderr}")
"""

from __future__ import annotations

import os
import signal
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from scrat.core.result import Err, Ok, Result

__all__ = [
    "ProcessError",
    "ShellProcess",
    "ShellResult",
    "run",
    "run_shell",
    "start_shell",
]

ProcessErrorKind = Literal["exit", "timeout", "spawn"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it never exited).
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
        kind: Whether the command exited non-zero, timed out, or never started.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    kind: ProcessErrorKind = "exit"

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        match self.kind:
            case "spawn":
                return f"{cmd_str} could not be started: {self.stderr}"
            case "timeout":
                return f"{cmd_str} timed out"
            case _:
                return f"{cmd_str} failed (exit {self.returncode})"


@dataclass(frozen=True, slots=True)
class ShellResult:
    """A shell command that ran to completion (or was killed on timeout).

    Attributes:
        command: The command line as executed.
        returncode: Exit status, None if the process was killed on timeout.
        stdout: Captured standard output.
        stderr: Captured standard error.
        duration: Wall-clock seconds from spawn to exit.
    """

    command: str
    returncode: int | None
    stdout: str
    stderr: str
    duration: float

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def timed_out(self) -> bool:
        return self.returncode is None


class ShellProcess:
    """A spawned shell command whose output has not been collected yet."""

    def __init__(self, command: str, proc: subprocess.Popen[str], started: float) -> None:
        self.command = command
        self._proc = proc
        self._started = started

    @property
    def pid(self) -> int:
        return self._proc.pid

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self._started

    @property
    def finished(self) -> bool:
        """True once the shell has exited (its output may still be unread)."""
        return self._proc.poll() is not None

    def _kill(self) -> None:
        # The shell runs in its own session; kill the whole group so
        # grandchildren of compound commands release the output pipes.
        if hasattr(os, "killpg"):
            try:
                os.killpg(self._proc.pid, signal.SIGKILL)
                return
            except ProcessLookupError:
                pass
        self._proc.kill()

    def wait(self, *, input_text: str | None = None, timeout: float | None = None) -> ShellResult:
        """Feed stdin (if piped), wait for exit and collect output.

        ``communicate`` writes ``input_text`` and closes stdin; a child that
        exits without reading it does not make this call fail, the exit status
        is what gets reported.
        """
        try:
            stdout, stderr = self._proc.communicate(input=input_text, timeout=timeout)
            returncode: int | None = self._proc.returncode
        except subprocess.TimeoutExpired:
            self._kill()
            stdout, stderr = self._proc.communicate()
            stderr = (stderr or "") + f"\ncommand timed out after {timeout}s"
            returncode = None

        return ShellResult(
            command=self.command,
            returncode=returncode,
            stdout=stdout or "",
            stderr=stderr or "",
            duration=time.monotonic() - self._started,
        )


def start_shell(
    command: str,
    cwd: Path,
    *,
    pipe_stdin: bool = False,
    env: dict[str, str] | None = None,
) -> Result[ShellProcess, ProcessError]:
    """Spawn ``command`` through the shell with stdout/stderr captured."""
    started = time.monotonic()
    try:
        proc = subprocess.Popen(
            command,
            shell=True,
            cwd=str(cwd),
            env=env,
            stdin=subprocess.PIPE if pipe_stdin else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            start_new_session=True,
        )
    except OSError as e:
        return Err(
            ProcessError(
                command=("sh", "-c", command),
                returncode=-1,
                stdout="",
                stderr=str(e),
                kind="spawn",
            )
        )
    return Ok(ShellProcess(command, proc, started))


def run_shell(
    command: str,
    cwd: Path,
    *,
    input_text: str | None = None,
    timeout: float | None = None,
    env: dict[str, str] | None = None,
) -> Result[ShellResult, ProcessError]:
    """Run a shell command to completion.

    Returns Ok(ShellResult) whatever the exit status; callers decide what a
    non-zero exit means. Err only when the shell could not be spawned.
    """
    started = start_shell(command, cwd, pipe_stdin=input_text is not None, env=env)
    if isinstance(started, Err):
        return started
    return Ok(started.value.wait(input_text=input_text, timeout=timeout))


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
    input_text: str | None = None,
) -> Result[str, ProcessError]:
    """Execute an argv command and return stdout or error.

    ``input_text`` (if given) is written to the command's stdin.

    Example:
        result = run(["git", "rev-parse", "HEAD"], cwd=repo_path)
        match result:
            case Ok(output):
                print(output.strip())
            case Err(e):
                print(f"git failed: {e.stderr}")
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            input=input_text,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
                kind="timeout",
            )
        )
    except OSError as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=str(e),
                kind="spawn",
            )
        )

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)
