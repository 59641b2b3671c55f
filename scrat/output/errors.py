"""Error presentation for ship failures.

Maps every ``ShipError`` variant to console lines and a hint where the
user can act on it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from scrat.hooks.errors import CommandFailed, FilterOutputInvalid, ToolExecFailed
from scrat.output.console import Style
from scrat.ship.errors import PhaseFailed, PreflightFailed, ShipError

if TYPE_CHECKING:
    from scrat.output.console import ConsoleProtocol

__all__ = ["print_ship_error"]


def print_ship_error(error: ShipError, console: ConsoleProtocol) -> None:
    match error:
        case PreflightFailed(messages=messages):
            console.error("preflight checks failed")
            for message in messages:
                console.print(f"  - {message}", Style.ERROR)
            console.print("hint: fix the checks above, nothing was changed", Style.DIM)
        case PhaseFailed(phase=phase, message=message):
            console.error(f"{phase} phase failed")
            console.print(message, Style.DIM)
        case CommandFailed(command=command, exit_code=code, stderr=stderr):
            status = "timed out" if code is None else f"exit {code}"
            console.error(f"hook command failed ({status}): {command}")
            if stderr:
                console.print(stderr, Style.DIM)
        case FilterOutputInvalid(command=command, detail=detail):
            console.error(f"filter hook produced invalid output: {command}")
            console.print(detail, Style.DIM)
            console.print("hint: a filter must print one JSON object on stdout", Style.DIM)
        case ToolExecFailed(command=command, message=message):
            console.error(f"failed to execute {command}")
            console.print(message, Style.DIM)
