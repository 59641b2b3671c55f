"""Exit codes for the scrat CLI.

The numeric values are part of the CLI contract and should remain stable:
- 0: Success
- 1: User error (bad input, failed preflight checks)
- 2: Environment error (missing tools, command could not be spawned)
- 3: Release error (a phase or hook command failed)
- 5: I/O error (config unreadable)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    IO_ERROR = 5
