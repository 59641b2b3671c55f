"""Error values for the ship pipeline phases."""

from __future__ import annotations

from dataclasses import dataclass

from scrat.core.errors import ErrorCode
from scrat.hooks.errors import CommandFailed, FilterOutputInvalid, HookError, ToolExecFailed
from scrat.ship.model import ShipPhase


@dataclass(frozen=True, slots=True)
class PreflightFailed:
    """One or more preflight checks did not pass; nothing was changed."""

    messages: tuple[str, ...]

    def __str__(self) -> str:
        return f"preflight checks failed: {'; '.join(self.messages)}"


@dataclass(frozen=True, slots=True)
class PhaseFailed:
    phase: ShipPhase
    message: str

    def __str__(self) -> str:
        return f"{self.phase} phase failed: {self.message}"


ShipError = PreflightFailed | PhaseFailed | HookError


def ship_error_code(error: ShipError) -> ErrorCode:
    match error:
        case PreflightFailed():
            return ErrorCode.USER_ERROR
        case ToolExecFailed():
            return ErrorCode.ENV_ERROR
        case PhaseFailed() | CommandFailed() | FilterOutputInvalid():
            return ErrorCode.BUILD_ERROR
