"""Execute one hook batch.

- PARALLEL, one command: run directly.
- PARALLEL, several commands: spawn all of them, then join every child in
  spawn order. Outputs are reported in spawn order whatever order the
  children finish in. A failing child does not cancel its siblings; the
  first failure (in spawn order) is returned once all children are joined.
- SYNC: run the command alone.
- FILTER: run the command alone with the pipeline context JSON on stdin; its
  stdout must be a JSON document and becomes the new context.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from scrat.core.result import Err, Ok, Result
from scrat.hooks.batches import Batch, BatchKind
from scrat.hooks.context import HookContext, interpolate
from scrat.hooks.errors import (
    CommandFailed,
    FilterOutputInvalid,
    HookError,
    ToolExecFailed,
    truncate,
)
from scrat.platform.process import ShellProcess, ShellResult, start_shell

__all__ = ["EMPTY_CONTEXT_JSON", "BatchResult", "HookOutput", "run_batch"]

logger = logging.getLogger(__name__)

# Sent to filters when no pipeline context exists yet.
EMPTY_CONTEXT_JSON = "{}"

_DRAIN_GRACE_SECONDS = 1.0


@dataclass(frozen=True, slots=True)
class HookOutput:
    """Result of one hook command.

    Attributes:
        command: The command as configured (before interpolation).
        success: Whether it exited zero.
        stdout: Captured standard output.
        stderr: Captured standard error.
        duration: Wall-clock seconds.
    """

    command: str
    success: bool
    stdout: str
    stderr: str
    duration: float


@dataclass(frozen=True, slots=True)
class BatchResult:
    outputs: tuple[HookOutput, ...]
    # Only set by FILTER batches.
    context_json: str | None = None


def _to_output(command: str, done: ShellResult) -> HookOutput:
    return HookOutput(
        command=command,
        success=done.ok,
        stdout=done.stdout,
        stderr=done.stderr,
        duration=done.duration,
    )


def _command_failed(command: str, done: ShellResult) -> CommandFailed:
    return CommandFailed(command=command, exit_code=done.returncode, stderr=done.stderr.strip())


def _remaining(proc: ShellProcess, timeout: float | None) -> float | None:
    if timeout is None:
        return None
    remaining = max(0.0, timeout - proc.elapsed)
    # A child that already exited only needs its pipes drained.
    if proc.finished:
        return max(remaining, _DRAIN_GRACE_SECONDS)
    return remaining


def _run_single(
    command: str,
    *,
    context: HookContext,
    cwd: Path,
    timeout: float | None,
) -> Result[HookOutput, HookError]:
    interpolated = interpolate(command, context)
    logger.debug("running hook: %s", interpolated)

    started = start_shell(interpolated, cwd)
    if isinstance(started, Err):
        return Err(ToolExecFailed(command=command, message=started.error.stderr))

    done = started.value.wait(timeout=timeout)
    if not done.ok:
        return Err(_command_failed(command, done))
    return Ok(_to_output(command, done))


def _run_parallel(
    commands: tuple[str, ...],
    *,
    context: HookContext,
    cwd: Path,
    timeout: float | None,
) -> Result[BatchResult, HookError]:
    spawned: list[tuple[str, ShellProcess]] = []
    spawn_error: HookError | None = None

    for command in commands:
        interpolated = interpolate(command, context)
        logger.debug("spawning hook: %s", interpolated)
        started = start_shell(interpolated, cwd)
        if isinstance(started, Err):
            spawn_error = ToolExecFailed(command=command, message=started.error.stderr)
            break
        spawned.append((command, started.value))

    # Join every child that was started, even after a spawn failure.
    outputs: list[HookOutput] = []
    first_failure: HookError | None = None
    for command, proc in spawned:
        done = proc.wait(timeout=_remaining(proc, timeout))
        outputs.append(_to_output(command, done))
        if not done.ok and first_failure is None:
            first_failure = _command_failed(command, done)

    error = first_failure or spawn_error
    if error is not None:
        return Err(error)
    return Ok(BatchResult(outputs=tuple(outputs)))


def _run_filter(
    command: str,
    *,
    context: HookContext,
    cwd: Path,
    context_json: str | None,
    timeout: float | None,
) -> Result[BatchResult, HookError]:
    interpolated = interpolate(command, context)
    logger.debug("running filter hook: %s", interpolated)

    started = start_shell(interpolated, cwd, pipe_stdin=True)
    if isinstance(started, Err):
        return Err(ToolExecFailed(command=command, message=started.error.stderr))

    done = started.value.wait(input_text=context_json or EMPTY_CONTEXT_JSON, timeout=timeout)
    if not done.ok:
        return Err(_command_failed(command, done))

    text = done.stdout.strip()
    try:
        json.loads(text)
    except json.JSONDecodeError as e:
        shown = truncate(text) or "(empty output)"
        return Err(FilterOutputInvalid(command=command, detail=f"{e.msg}: {shown}"))

    return Ok(BatchResult(outputs=(_to_output(command, done),), context_json=text))


def run_batch(
    batch: Batch,
    *,
    context: HookContext,
    cwd: Path,
    context_json: str | None = None,
    timeout: float | None = None,
) -> Result[BatchResult, HookError]:
    """Run one batch.

    Args:
        batch: The batch to run.
        context: Values for ``{var}`` interpolation.
        cwd: Working directory for every command.
        context_json: Pipeline context handed to a FILTER batch (``{}`` if None).
        timeout: Per-command limit in seconds (None: wait forever).
    """
    match batch.kind:
        case BatchKind.FILTER:
            return _run_filter(
                batch.commands[0],
                context=context,
                cwd=cwd,
                context_json=context_json,
                timeout=timeout,
            )
        case BatchKind.SYNC:
            single = _run_single(batch.commands[0], context=context, cwd=cwd, timeout=timeout)
        case BatchKind.PARALLEL if len(batch.commands) == 1:
            single = _run_single(batch.commands[0], context=context, cwd=cwd, timeout=timeout)
        case _:
            return _run_parallel(batch.commands, context=context, cwd=cwd, timeout=timeout)

    if isinstance(single, Err):
        return single
    return Ok(BatchResult(outputs=(single.value,)))
