"""Ship planning: preflight checks and version resolution.

``plan_ship`` runs before anything is changed. A failing check aborts with
``PreflightFailed``; otherwise it returns a ``ReadyShip`` that can be
executed (or dry-run) with an optional progress observer. With
``ShipOptions.conventional`` the next version is the one git-cliff derives
from conventional commits.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from scrat.core.config import Config
from scrat.core.result import Err, Ok, Result
from scrat.services.conventional import bumped_version
from scrat.services.git import GitRepository
from scrat.services.preflight import PreflightReport, run_preflight
from scrat.services.semver import ResolvedVersion, SemVer, resolve_version
from scrat.ship.collaborators import Collaborators, default_collaborators
from scrat.ship.errors import PhaseFailed, PreflightFailed, ShipError
from scrat.ship.model import ShipObserver, ShipOptions, ShipOutcome, ShipPhase

__all__ = ["ReadyShip", "plan_ship"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReadyShip:
    """A ship run whose preflight passed and whose version is known."""

    project_root: Path
    config: Config
    options: ShipOptions
    version: ResolvedVersion
    preflight: PreflightReport

    @property
    def has_previous_tag(self) -> bool:
        return self.version.tagged

    @property
    def warnings(self) -> tuple[str, ...]:
        return tuple(c.message for c in self.preflight.checks if c.is_warning)

    def execute(
        self,
        observer: ShipObserver | None = None,
        *,
        collaborators: Collaborators | None = None,
    ) -> Result[ShipOutcome, ShipError]:
        """Run every phase; ``observer`` receives progress events."""
        from scrat.ship.orchestrator import ShipRunner

        collab = collaborators or default_collaborators(self.project_root, self.config)
        return ShipRunner(self, collab, observer).run()


def plan_ship(
    project_root: Path,
    config: Config,
    options: ShipOptions,
    *,
    repo: GitRepository | None = None,
    which: Callable[[str], str | None] = shutil.which,
) -> Result[ReadyShip, ShipError]:
    repo = repo or GitRepository(project_root)

    report = run_preflight(
        repo,
        config,
        release=not options.no_release,
        conventional=options.conventional and options.explicit_version is None,
        which=which,
    )
    if not report.all_passed:
        messages = tuple(c.message for c in report.failures)
        logger.debug("preflight failed: %s", messages)
        return Err(PreflightFailed(messages))

    suggested: SemVer | None = None
    if options.conventional and options.explicit_version is None:
        bumped = bumped_version(project_root)
        if isinstance(bumped, Err):
            return Err(PhaseFailed(ShipPhase.VERSION, bumped.error))
        suggested = bumped.value

    resolved = resolve_version(
        tags=repo.version_tags(),
        explicit=options.explicit_version,
        bump=options.bump,
        suggested=suggested,
    )
    if isinstance(resolved, Err):
        return Err(PhaseFailed(ShipPhase.VERSION, resolved.error))

    logger.debug(
        "resolved version %s -> %s (%s)",
        resolved.value.previous,
        resolved.value.next,
        resolved.value.strategy,
    )
    return Ok(
        ReadyShip(
            project_root=project_root,
            config=config,
            options=options,
            version=resolved.value,
            preflight=report,
        )
    )
