"""Error values returned by hook batch execution."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "CommandFailed",
    "FilterOutputInvalid",
    "HookError",
    "ToolExecFailed",
    "truncate",
]

_DETAIL_LIMIT = 200


def truncate(text: str, limit: int = _DETAIL_LIMIT) -> str:
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


@dataclass(frozen=True, slots=True)
class CommandFailed:
    """A hook command exited non-zero (exit_code None: killed on timeout)."""

    command: str
    exit_code: int | None
    stderr: str

    def __str__(self) -> str:
        status = "timed out" if self.exit_code is None else f"exit {self.exit_code}"
        msg = f"hook command failed ({status}): {self.command}"
        if self.stderr:
            msg += f"\n{self.stderr}"
        return msg


@dataclass(frozen=True, slots=True)
class FilterOutputInvalid:
    """A ``filter:`` hook printed something that is not a pipeline context."""

    command: str
    detail: str

    def __str__(self) -> str:
        return f"filter hook produced invalid output: {self.command}: {self.detail}"


@dataclass(frozen=True, slots=True)
class ToolExecFailed:
    """A command could not be spawned at all."""

    command: str
    message: str

    def __str__(self) -> str:
        return f"failed to execute {self.command}: {self.message}"


HookError = CommandFailed | FilterOutputInvalid | ToolExecFailed
