"""Console output and logging setup."""

from .console import ConsoleProtocol, MockConsole, RichConsole, Style
from .logging_setup import setup_logging

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "RichConsole",
    "Style",
    "setup_logging",
]
