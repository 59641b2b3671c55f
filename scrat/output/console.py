"""Console output abstraction.

Commands print through ``ConsoleProtocol`` so the ship progress and hook
listings can be rendered with Rich in a terminal and captured with
``MockConsole`` in tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    SKIPPED = auto()
    DIM = auto()
    BOLD = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Styled line-oriented output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def newline(self) -> None: ...


_RICH_STYLES = {
    Style.DEFAULT: "",
    Style.SUCCESS: "green",
    Style.ERROR: "red bold",
    Style.WARNING: "yellow",
    Style.INFO: "cyan",
    Style.SKIPPED: "dim yellow",
    Style.DIM: "dim",
    Style.BOLD: "bold",
    Style.HEADER: "blue bold",
}


class RichConsole:
    """Console implementation using Rich.

    Hook commands and stderr excerpts are printed with markup disabled so
    brackets in user commands are not read as Rich tags.
    """

    def __init__(self, *, stderr: bool = False) -> None:
        from rich.console import Console

        self._console = Console(stderr=stderr, highlight=False)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = _RICH_STYLES.get(style, "")
        self._console.print(message, style=rich_style or None, markup=False)

    def _tagged(self, tag: str, style: str, message: str) -> None:
        from rich.text import Text

        self._console.print(Text.assemble((tag, style), " ", message))

    def success(self, message: str) -> None:
        self._tagged("✓", "green", message)

    def error(self, message: str) -> None:
        self._tagged("error:", "red bold", message)

    def warning(self, message: str) -> None:
        self._tagged("warning:", "yellow", message)

    def info(self, message: str) -> None:
        self._tagged("info:", "cyan", message)

    def header(self, message: str) -> None:
        self._console.print()
        self._console.print(message, style="blue bold", markup=False)

    def newline(self) -> None:
        self._console.print()


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"✓ {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"info: {message}", Style.INFO))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def newline(self) -> None:
        self.outputs.append(OutputRecord("", Style.DEFAULT))

    # Test helpers

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        return sum(1 for o in self.outputs if o.style == style)
