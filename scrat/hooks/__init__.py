"""Hook execution: user shell commands at release phase boundaries.

Commands run in parallel by default. ``sync:`` makes a command a barrier and
``filter:`` makes it a barrier that receives the pipeline context as JSON on
stdin and prints the (possibly rewritten) context on stdout.
"""

from .batches import Batch, BatchKind, split_batches
from .context import HookContext, interpolate
from .errors import CommandFailed, FilterOutputInvalid, HookError, ToolExecFailed
from .executor import BatchResult, HookOutput, run_batch
from .runner import HookRunResult, run_hooks

__all__ = [
    "Batch",
    "BatchKind",
    "BatchResult",
    "CommandFailed",
    "FilterOutputInvalid",
    "HookContext",
    "HookError",
    "HookOutput",
    "HookRunResult",
    "ToolExecFailed",
    "interpolate",
    "run_batch",
    "run_hooks",
    "split_batches",
]
