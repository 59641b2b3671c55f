"""Split a hook list into execution batches.

Commands run in parallel by default. A barrier prefix changes that:

    ["echo a", "echo b", "sync: make docs", "echo c", "filter: ./enrich.py"]

becomes

    PARALLEL(echo a, echo b) -> SYNC(make docs) -> PARALLEL(echo c) -> FILTER(./enrich.py)

Everything before a barrier has finished when it starts, and nothing after it
starts until it is done.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

__all__ = [
    "FILTER_PREFIX",
    "SYNC_PREFIX",
    "Batch",
    "BatchKind",
    "split_batches",
]

FILTER_PREFIX = "filter:"
SYNC_PREFIX = "sync:"


class BatchKind(StrEnum):
    PARALLEL = "parallel"
    SYNC = "sync"
    FILTER = "filter"


@dataclass(frozen=True, slots=True)
class Batch:
    """A non-empty group of commands; SYNC and FILTER hold exactly one."""

    kind: BatchKind
    commands: tuple[str, ...]

    @property
    def is_barrier(self) -> bool:
        return self.kind is not BatchKind.PARALLEL


def _barrier(command: str) -> tuple[BatchKind, str] | None:
    # filter: is checked before sync:
    if command.startswith(FILTER_PREFIX):
        return BatchKind.FILTER, command[len(FILTER_PREFIX) :].lstrip()
    if command.startswith(SYNC_PREFIX):
        return BatchKind.SYNC, command[len(SYNC_PREFIX) :].lstrip()
    return None


def split_batches(commands: Sequence[str]) -> list[Batch]:
    """Split commands into ordered batches at ``sync:``/``filter:`` barriers."""
    batches: list[Batch] = []
    pending: list[str] = []

    for command in commands:
        barrier = _barrier(command)
        if barrier is None:
            pending.append(command)
            continue

        if pending:
            batches.append(Batch(BatchKind.PARALLEL, tuple(pending)))
            pending = []
        kind, body = barrier
        batches.append(Batch(kind, (body,)))

    if pending:
        batches.append(Batch(BatchKind.PARALLEL, tuple(pending)))

    return batches
