"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from scrat.core.result import Err, Result
from scrat.output.errors import print_ship_error
from scrat.ship.errors import ShipError, ship_error_code

if TYPE_CHECKING:
    from scrat.output.console import ConsoleProtocol

T = TypeVar("T")


def exit_on_ship_error(result: Result[T, ShipError], console: ConsoleProtocol) -> T:
    """Return the value of an ``Ok``; print an ``Err`` and exit with its code."""
    if isinstance(result, Err):
        print_ship_error(result.error, console)
        exit_with_code(int(ship_error_code(result.error)))
    return result.value


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)
