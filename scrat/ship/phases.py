"""Phase bodies of a ship run.

Each body takes the run environment and the current pipeline context,
records its results into the context and returns the phase outcome. In a dry
run bodies only describe what they would do.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TypeAlias

from scrat.core.config import Config
from scrat.core.result import Err, Ok, Result
from scrat.hooks.context import interpolate
from scrat.platform.process import run_shell
from scrat.ship.collaborators import Collaborators, ReleaseRequest
from scrat.ship.errors import PhaseFailed, ShipError
from scrat.ship.model import PhaseOutcome, ShipOptions, ShipPhase, Skipped, Success
from scrat.ship.pipeline import PipelineContext

__all__ = ["PHASE_BODIES", "PhaseBody", "PhaseEnv"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PhaseEnv:
    project_root: Path
    config: Config
    options: ShipOptions
    collaborators: Collaborators
    # e.g. "patch" or "explicit"
    strategy: str
    warnings: tuple[str, ...] = ()

    @property
    def dry_run(self) -> bool:
        return self.options.dry_run


PhaseBody: TypeAlias = Callable[[PhaseEnv, PipelineContext], Result[PhaseOutcome, ShipError]]


def _short(sha: str) -> str:
    return sha[:8]


def _run_command(
    env: PhaseEnv,
    context: PipelineContext,
    *,
    phase: ShipPhase,
    what: str,
    command: str,
) -> Result[None, ShipError]:
    interpolated = interpolate(command, context.hook_context())
    logger.debug("running %s command: %s", what, interpolated)

    result = run_shell(interpolated, env.project_root, timeout=env.config.commands.timeout)
    if isinstance(result, Err):
        return Err(PhaseFailed(phase, f"failed to execute {what} command: {result.error.stderr}"))

    done = result.value
    if done.timed_out:
        return Err(PhaseFailed(phase, f"{what} command timed out: {done.stderr.strip()}"))
    if not done.ok:
        return Err(PhaseFailed(phase, f"{what} failed: {done.stderr.strip()}"))
    return Ok(None)


def _preflight(env: PhaseEnv, context: PipelineContext) -> Result[PhaseOutcome, ShipError]:
    if env.warnings:
        count = len(env.warnings)
        plural = "s" if count > 1 else ""
        return Ok(Success(f"All preflight checks passed ({count} warning{plural})"))
    return Ok(Success("All preflight checks passed"))


def _version(env: PhaseEnv, context: PipelineContext) -> Result[PhaseOutcome, ShipError]:
    return Ok(Success(f"{context.previous_version} → {context.version} ({env.strategy})"))


def _test(env: PhaseEnv, context: PipelineContext) -> Result[PhaseOutcome, ShipError]:
    if env.options.skip_tests:
        return Ok(Skipped("--skip-tests flag"))

    command = env.config.commands.test
    if command is None:
        return Ok(Skipped("no test command configured"))
    if env.dry_run:
        return Ok(Success(f"Would run: {command}"))

    ran = _run_command(env, context, phase=ShipPhase.TEST, what="tests", command=command)
    if isinstance(ran, Err):
        return ran
    return Ok(Success(f"Tests passed ({command})"))


def _bump(env: PhaseEnv, context: PipelineContext) -> Result[PhaseOutcome, ShipError]:
    if env.dry_run:
        return Ok(Success(f"Would bump {context.previous_version} → {context.version}"))

    result = env.collaborators.bumper.bump(context, changelog=not env.options.no_changelog)
    if isinstance(result, Err):
        return Err(PhaseFailed(ShipPhase.BUMP, result.error))

    bumped = result.value
    context.record_bump(bumped.changelog_updated, list(bumped.modified_files))
    changelog = " + changelog" if bumped.changelog_updated else ""
    files = ", ".join(bumped.modified_files) or "none"
    return Ok(Success(f"Bumped to {context.version}{changelog} (modified: {files})"))


def _publish(env: PhaseEnv, context: PipelineContext) -> Result[PhaseOutcome, ShipError]:
    if env.options.no_publish:
        return Ok(Skipped("--no-publish flag"))

    command = env.config.commands.publish
    if command is None:
        return Ok(Skipped("no publish command configured or detected"))
    if env.dry_run:
        return Ok(Success(f"Would run: {command}"))

    ran = _run_command(env, context, phase=ShipPhase.PUBLISH, what="publish", command=command)
    if isinstance(ran, Err):
        return ran
    return Ok(Success(f"Published ({command})"))


def _describe_git(options: ShipOptions, tag: str) -> PhaseOutcome:
    actions: list[str] = []
    if not options.no_commit:
        actions.append("commit")
    if not options.no_tag:
        actions.append(f"tag {tag}")
    if not actions and options.no_push:
        return Skipped("--no-commit, --no-tag and --no-push flags")

    text = "Would " + (", ".join(actions) if actions else "push")
    if actions:
        text += " (no push)" if options.no_push else " + push"
    return Success(text)


def _git(env: PhaseEnv, context: PipelineContext) -> Result[PhaseOutcome, ShipError]:
    options = env.options
    tag = context.tag
    if env.dry_run:
        return Ok(_describe_git(options, tag))

    ops = env.collaborators.git
    parts: list[str] = []

    if options.no_commit:
        head = ops.head_hash()
        if isinstance(head, Err):
            return Err(PhaseFailed(ShipPhase.GIT, head.error))
        commit_hash = head.value
        parts.append(f"HEAD at {_short(commit_hash)}")
    else:
        committed = ops.commit_all(f"chore: release {context.version}")
        if isinstance(committed, Err):
            return Err(PhaseFailed(ShipPhase.GIT, committed.error))
        commit_hash = committed.value
        parts.append(f"Committed {_short(commit_hash)}")

    if not options.no_tag:
        tagged = ops.create_tag(tag, f"Release {context.version}")
        if isinstance(tagged, Err):
            return Err(PhaseFailed(ShipPhase.GIT, tagged.error))
        parts.append(f"tagged {tag}")

    pushed_branch: str | None = None
    if options.no_push:
        message = ", ".join(parts) + " (push skipped)"
    else:
        pushed_branch = ops.current_branch() or "HEAD"
        pushed = ops.push(pushed_branch, tags=not options.no_tag)
        if isinstance(pushed, Err):
            return Err(PhaseFailed(ShipPhase.GIT, pushed.error))
        parts.append("pushed")
        message = ", ".join(parts)

    context.record_git(commit_hash, pushed_branch)
    return Ok(Success(message))


def _release_request(env: PhaseEnv, context: PipelineContext, notes: str | None) -> ReleaseRequest:
    release = env.config.release
    title = context.tag
    if release.title is not None:
        title = interpolate(release.title, context.hook_context())
    return ReleaseRequest(
        tag=context.tag,
        title=title,
        draft=release.draft,
        notes=notes,
        assets=tuple(context.assets),
        discussion_category=release.discussion_category,
    )


def _release(env: PhaseEnv, context: PipelineContext) -> Result[PhaseOutcome, ShipError]:
    if env.options.no_release:
        return Ok(Skipped("--no-release flag"))
    if not env.config.release.github_release:
        return Ok(Skipped("github_release = false in config"))
    if env.dry_run:
        return Ok(Success(f"Would create GitHub release for {context.tag}"))

    notes: str | None = None
    if env.config.release.render_notes:
        rendered = env.collaborators.notes.render(context)
        if isinstance(rendered, Err):
            return Err(PhaseFailed(ShipPhase.RELEASE, rendered.error))
        notes = rendered.value
        context.record_notes(notes)

    host = env.collaborators.host
    request = _release_request(env, context, notes)

    exists = host.exists(request.tag)
    if isinstance(exists, Err):
        return Err(PhaseFailed(ShipPhase.RELEASE, exists.error))

    if not exists.value:
        created = host.create(request)
        if isinstance(created, Err):
            return Err(PhaseFailed(ShipPhase.RELEASE, created.error))
        context.record_release(created.value)
        if created.value is None:
            return Ok(Success(f"Created GitHub release {request.tag}"))
        return Ok(Success(f"Created GitHub release: {created.value}"))

    edited = host.edit(request)
    if isinstance(edited, Err):
        return Err(PhaseFailed(ShipPhase.RELEASE, edited.error))

    for asset in request.assets:
        name = Path(asset).name
        deleted = host.delete_asset(request.tag, name)
        if isinstance(deleted, Err):
            logger.debug("asset %s not deleted (may not exist yet): %s", name, deleted.error)
        uploaded = host.upload_asset(request.tag, asset)
        if isinstance(uploaded, Err):
            return Err(PhaseFailed(ShipPhase.RELEASE, uploaded.error))

    context.record_release(edited.value)
    if edited.value is None:
        return Ok(Success(f"Updated GitHub release {request.tag}"))
    return Ok(Success(f"Updated GitHub release: {edited.value}"))


PHASE_BODIES: dict[ShipPhase, PhaseBody] = {
    ShipPhase.PREFLIGHT: _preflight,
    ShipPhase.VERSION: _version,
    ShipPhase.TEST: _test,
    ShipPhase.BUMP: _bump,
    ShipPhase.PUBLISH: _publish,
    ShipPhase.GIT: _git,
    ShipPhase.RELEASE: _release,
}
