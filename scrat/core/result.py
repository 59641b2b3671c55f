"""Result type for explicit error handling.

Every fallible operation in scrat returns ``Result[T, E]`` instead of raising.
The release pipeline has many external failure points (hook commands, git,
gh, git-cliff) and each of them must be reported with the phase that failed,
so errors are carried as values up to the orchestrator and the CLI.

Usage:
    match run_hooks(commands, context=ctx, cwd=root):
        case Ok(result):
            print(f"{len(result.outputs)} hooks ran")
        case Err(error):
            print(f"hook failed: {error}")

Narrow with ``isinstance(result, Err)`` and return early; the remaining
branch is the ``Ok``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful result."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed result carrying an error value (a message or a frozen dataclass)."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
