"""Run a full hook list for one phase boundary."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from scrat.core.result import Err, Ok, Result
from scrat.hooks.batches import split_batches
from scrat.hooks.context import HookContext
from scrat.hooks.errors import HookError
from scrat.hooks.executor import HookOutput, run_batch

__all__ = ["HookRunResult", "run_hooks"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HookRunResult:
    """Outputs of every command, in batch order.

    ``context_json`` is the output of the last filter in the list, or None if
    no filter ran (the caller keeps its context).
    """

    outputs: tuple[HookOutput, ...]
    context_json: str | None = None

    @property
    def context_changed(self) -> bool:
        return self.context_json is not None


def run_hooks(
    commands: Sequence[str],
    *,
    context: HookContext,
    cwd: Path,
    context_json: str | None = None,
    timeout: float | None = None,
) -> Result[HookRunResult, HookError]:
    """Split ``commands`` into batches and run them one after another.

    The first failing batch stops the list; no later batch runs. Each filter
    receives the previous filter's output (or ``context_json`` for the first).
    """
    if not commands:
        return Ok(HookRunResult(outputs=()))

    batches = split_batches(commands)
    logger.debug("executing %d hook batch(es) for %d command(s)", len(batches), len(commands))

    outputs: list[HookOutput] = []
    current_json = context_json
    changed_json: str | None = None

    for batch in batches:
        result = run_batch(
            batch,
            context=context,
            cwd=cwd,
            context_json=current_json,
            timeout=timeout,
        )
        if isinstance(result, Err):
            logger.debug("hook batch failed (%s): %s", batch.kind, result.error)
            return result

        outputs.extend(result.value.outputs)
        if result.value.context_json is not None:
            current_json = result.value.context_json
            changed_json = current_json

    return Ok(HookRunResult(outputs=tuple(outputs), context_json=changed_json))
