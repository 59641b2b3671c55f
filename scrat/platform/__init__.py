"""Process execution layer."""

from .process import (
    ProcessError,
    ShellProcess,
    ShellResult,
    run,
    run_shell,
    start_shell,
)

__all__ = [
    "ProcessError",
    "ShellProcess",
    "ShellResult",
    "run",
    "run_shell",
    "start_shell",
]
