"""Data types shared by the ship planner and orchestrator."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Literal

from scrat.core.structured import StrDict
from scrat.ship.pipeline import PipelineContext

BumpKind = Literal["major", "minor", "patch"]


class ShipPhase(StrEnum):
    """Phases of a ship run, in execution order."""

    PREFLIGHT = "preflight"
    VERSION = "version"
    TEST = "test"
    BUMP = "bump"
    PUBLISH = "publish"
    GIT = "git"
    RELEASE = "release"


PHASE_ORDER: tuple[ShipPhase, ...] = tuple(ShipPhase)


@dataclass(frozen=True, slots=True)
class Success:
    message: str

    def to_dict(self) -> StrDict:
        return {"status": "success", "message": self.message}


@dataclass(frozen=True, slots=True)
class Skipped:
    reason: str

    def to_dict(self) -> StrDict:
        return {"status": "skipped", "reason": self.reason}


PhaseOutcome = Success | Skipped


@dataclass(frozen=True, slots=True)
class PhaseStarted:
    phase: ShipPhase


@dataclass(frozen=True, slots=True)
class PhaseCompleted:
    phase: ShipPhase
    outcome: PhaseOutcome


@dataclass(frozen=True, slots=True)
class HooksStarted:
    """Hook commands are about to run (or would run, in a dry run).

    ``commands`` are already interpolated for display.
    """

    phase: ShipPhase
    count: int
    commands: tuple[str, ...]
    will_execute: bool


@dataclass(frozen=True, slots=True)
class HooksCompleted:
    phase: ShipPhase
    count: int


ShipEvent = PhaseStarted | PhaseCompleted | HooksStarted | HooksCompleted
ShipObserver = Callable[[ShipEvent], None]


@dataclass(frozen=True, slots=True)
class ShipOptions:
    """Per-run switches; the default is a full, real release with a patch bump."""

    explicit_version: str | None = None
    bump: BumpKind = "patch"
    # Ask git-cliff for the next version; ignored when explicit_version is set.
    conventional: bool = False
    no_changelog: bool = False
    no_publish: bool = False
    no_commit: bool = False
    no_tag: bool = False
    no_push: bool = False
    no_release: bool = False
    dry_run: bool = False
    skip_tests: bool = False


@dataclass(frozen=True, slots=True)
class ShipOutcome:
    version: str
    previous_version: str
    tag: str
    phases: tuple[tuple[ShipPhase, PhaseOutcome], ...]
    # Hook commands executed, or reported in a dry run.
    hooks_run: int
    dry_run: bool
    context: PipelineContext = field(compare=False)

    def outcome_for(self, phase: ShipPhase) -> PhaseOutcome | None:
        for p, outcome in self.phases:
            if p is phase:
                return outcome
        return None

    def to_dict(self) -> StrDict:
        return {
            "version": self.version,
            "previous_version": self.previous_version,
            "tag": self.tag,
            "phases": [[str(p), outcome.to_dict()] for p, outcome in self.phases],
            "hooks_run": self.hooks_run,
            "dry_run": self.dry_run,
            "context": self.context.to_dict(),
        }
