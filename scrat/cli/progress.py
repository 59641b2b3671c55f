"""Render ship events as console lines."""

from __future__ import annotations

from scrat.output.console import ConsoleProtocol, Style
from scrat.ship.model import (
    HooksCompleted,
    HooksStarted,
    PhaseCompleted,
    PhaseStarted,
    ShipEvent,
    Skipped,
    Success,
)


class ProgressPrinter:
    """``ShipObserver`` printing one line per phase and per hook list."""

    def __init__(self, console: ConsoleProtocol) -> None:
        self.console = console

    def __call__(self, event: ShipEvent) -> None:
        match event:
            case PhaseStarted():
                pass
            case PhaseCompleted(phase=phase, outcome=Success(message=message)):
                self.console.success(f"{phase}: {message}")
            case PhaseCompleted(phase=phase, outcome=Skipped(reason=reason)):
                self.console.print(f"- {phase}: skipped ({reason})", Style.SKIPPED)
            case HooksStarted(phase=phase, count=count, commands=commands, will_execute=run):
                plural = "s" if count != 1 else ""
                verb = "running" if run else "would run"
                self.console.print(f"  {phase} hooks: {verb} {count} command{plural}", Style.DIM)
                for command in commands:
                    self.console.print(f"    $ {command}", Style.DIM)
            case HooksCompleted():
                pass
