"""Ship phase orchestrator.

A linear state machine over the fixed phase order. Around each phase body
the matching hook lists run:

    preflight, version, pre_ship,
    pre_test, test, post_test,
    pre_bump, bump, post_bump,
    pre_publish, publish, post_publish,
    pre_tag, git, post_tag,
    pre_release, release, post_release,
    post_ship

The runner owns the one ``PipelineContext`` of the run. Hook code only ever
sees it as JSON; when a filter returns a new document, the runner parses it
and replaces its context wholesale before the next step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, TypeAlias

from scrat.core.result import Err, Ok, Result
from scrat.hooks import FilterOutputInvalid, interpolate, run_hooks
from scrat.hooks.batches import BatchKind, split_batches
from scrat.services.git import parse_owner_repo
from scrat.ship.collaborators import Collaborators
from scrat.ship.errors import ShipError
from scrat.ship.model import (
    HooksCompleted,
    HooksStarted,
    PhaseCompleted,
    PhaseOutcome,
    PhaseStarted,
    ShipEvent,
    ShipObserver,
    ShipOutcome,
    ShipPhase,
)
from scrat.ship.phases import PHASE_BODIES, PhaseEnv
from scrat.ship.pipeline import PipelineContext

if TYPE_CHECKING:
    from scrat.ship.plan import ReadyShip

__all__ = ["STEPS", "HookStep", "PhaseStep", "ShipRunner", "build_context"]

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class PhaseStep:
    phase: ShipPhase


@dataclass(frozen=True, slots=True)
class HookStep:
    hook: str
    # Phase the hook list is reported under.
    phase: ShipPhase


Step: TypeAlias = PhaseStep | HookStep

STEPS: tuple[Step, ...] = (
    PhaseStep(ShipPhase.PREFLIGHT),
    PhaseStep(ShipPhase.VERSION),
    HookStep("pre_ship", ShipPhase.PREFLIGHT),
    HookStep("pre_test", ShipPhase.TEST),
    PhaseStep(ShipPhase.TEST),
    HookStep("post_test", ShipPhase.TEST),
    HookStep("pre_bump", ShipPhase.BUMP),
    PhaseStep(ShipPhase.BUMP),
    HookStep("post_bump", ShipPhase.BUMP),
    HookStep("pre_publish", ShipPhase.PUBLISH),
    PhaseStep(ShipPhase.PUBLISH),
    HookStep("post_publish", ShipPhase.PUBLISH),
    HookStep("pre_tag", ShipPhase.GIT),
    PhaseStep(ShipPhase.GIT),
    HookStep("post_tag", ShipPhase.GIT),
    HookStep("pre_release", ShipPhase.RELEASE),
    PhaseStep(ShipPhase.RELEASE),
    HookStep("post_release", ShipPhase.RELEASE),
    HookStep("post_ship", ShipPhase.RELEASE),
)


def build_context(ship: ReadyShip, collaborators: Collaborators) -> PipelineContext:
    """Initial pipeline context for a ship run."""
    git = collaborators.git
    resolved = ship.version
    remote = git.remote_url()
    owner, repo = (parse_owner_repo(remote) if remote else None) or (UNKNOWN, UNKNOWN)

    context = PipelineContext(
        version=str(resolved.next),
        previous_version=str(resolved.previous),
        tag=resolved.next.to_tag(),
        previous_tag=resolved.previous.to_tag(),
        owner=owner,
        repo=repo,
        ecosystem=ship.config.project.ecosystem or UNKNOWN,
        repo_url=remote,
        branch=git.current_branch(),
        changelog_path=str(ship.project_root / "CHANGELOG.md"),
        dry_run=ship.options.dry_run,
    )
    context.set_assets(list(ship.config.release.assets))
    if ship.has_previous_tag:
        context.stats = git.release_stats(context.previous_tag)
    return context


def _last_filter(commands: tuple[str, ...]) -> str:
    filters = [b.commands[0] for b in split_batches(commands) if b.kind is BatchKind.FILTER]
    return filters[-1] if filters else ""


class ShipRunner:
    """Executes the steps of one ship run.

    Attributes:
        context: The current pipeline context (replaced after filters).
        phases: Outcomes of completed phases, in order.
        hooks_run: Hook commands executed (or reported, in a dry run).
    """

    def __init__(
        self,
        ship: ReadyShip,
        collaborators: Collaborators,
        observer: ShipObserver | None = None,
    ) -> None:
        self.ship = ship
        self.env = PhaseEnv(
            project_root=ship.project_root,
            config=ship.config,
            options=ship.options,
            collaborators=collaborators,
            strategy=ship.version.strategy,
            warnings=ship.warnings,
        )
        self._observer = observer
        self.context = build_context(ship, collaborators)
        self.phases: list[tuple[ShipPhase, PhaseOutcome]] = []
        self.hooks_run = 0

    @property
    def project_root(self) -> Path:
        return self.ship.project_root

    @property
    def dry_run(self) -> bool:
        return self.ship.options.dry_run

    def _emit(self, event: ShipEvent) -> None:
        if self._observer is not None:
            self._observer(event)

    def run(self) -> Result[ShipOutcome, ShipError]:
        logger.debug(
            "ship %s -> %s (dry_run=%s)",
            self.context.previous_version,
            self.context.version,
            self.dry_run,
        )
        for step in STEPS:
            match step:
                case PhaseStep(phase=phase):
                    result = self._run_phase(phase)
                case HookStep(hook=hook, phase=phase):
                    result = self._run_hook_list(hook, phase)
            if isinstance(result, Err):
                logger.debug("ship aborted: %s", result.error)
                return result

        outcome = ShipOutcome(
            version=self.context.version,
            previous_version=self.context.previous_version,
            tag=self.context.tag,
            phases=tuple(self.phases),
            hooks_run=self.hooks_run,
            dry_run=self.dry_run,
            context=self.context,
        )
        logger.debug(
            "ship complete: version=%s hooks_run=%d dry_run=%s",
            outcome.version,
            outcome.hooks_run,
            outcome.dry_run,
        )
        return Ok(outcome)

    def _run_phase(self, phase: ShipPhase) -> Result[None, ShipError]:
        self._emit(PhaseStarted(phase))
        logger.debug("phase %s started", phase)

        result = PHASE_BODIES[phase](self.env, self.context)
        if isinstance(result, Err):
            return result

        self._emit(PhaseCompleted(phase, result.value))
        self.phases.append((phase, result.value))
        logger.debug("phase %s completed: %s", phase, result.value)
        return Ok(None)

    def _run_hook_list(self, hook: str, phase: ShipPhase) -> Result[None, ShipError]:
        commands = self.ship.config.hooks.commands_for(hook)
        if not commands:
            return Ok(None)

        hook_ctx = self.context.hook_context()
        count = len(commands)
        self._emit(
            HooksStarted(
                phase=phase,
                count=count,
                commands=tuple(interpolate(c, hook_ctx) for c in commands),
                will_execute=not self.dry_run,
            )
        )

        if not self.dry_run:
            logger.debug("running %s hooks (%d command(s))", hook, count)
            ran = run_hooks(
                commands,
                context=hook_ctx,
                cwd=self.project_root,
                context_json=self.context.to_json(),
                timeout=self.ship.config.hooks.timeout,
            )
            if isinstance(ran, Err):
                return ran

            new_json = ran.value.context_json
            if new_json is not None:
                parsed = PipelineContext.from_json(new_json)
                if isinstance(parsed, Err):
                    return Err(
                        FilterOutputInvalid(command=_last_filter(commands), detail=parsed.error)
                    )
                self.context = parsed.value
                logger.debug("pipeline context replaced by %s filter output", hook)

        self._emit(HooksCompleted(phase=phase, count=count))
        self.hooks_run += count
        return Ok(None)
