"""Ship command: run the full release workflow."""

from __future__ import annotations

import json
from enum import StrEnum
from pathlib import Path

import typer

from scrat.cli.commands._helpers import exit_on_ship_error, exit_with_code
from scrat.cli.context import CLIContext, build_context
from scrat.cli.progress import ProgressPrinter
from scrat.core.config import Config
from scrat.core.errors import ErrorCode
from scrat.output.console import Style
from scrat.ship.model import BumpKind, ShipOptions, ShipOutcome
from scrat.ship.plan import ReadyShip, plan_ship


class BumpChoice(StrEnum):
    major = "major"
    minor = "minor"
    patch = "patch"
    # Next version from conventional commits (git-cliff).
    auto = "auto"

    @property
    def kind(self) -> BumpKind:
        match self:
            case BumpChoice.major:
                return "major"
            case BumpChoice.minor:
                return "minor"
            case BumpChoice.patch | BumpChoice.auto:
                return "patch"


def _use_conventional(bump: BumpChoice | None, config: Config) -> bool:
    """``--bump auto`` or, without ``--bump``, a conventional ``[version] strategy``."""
    if bump is None:
        return config.version.strategy == "conventional"
    return bump is BumpChoice.auto


def ship(
    version: str | None = typer.Option(
        None, "--version", help="Release this exact version (X.Y.Z) instead of bumping"
    ),
    bump: BumpChoice | None = typer.Option(
        None, "--bump", help="Version bump (default: [version] strategy, else patch)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would happen, change nothing"),
    skip_tests: bool = typer.Option(False, "--skip-tests", help="Skip the test phase"),
    no_publish: bool = typer.Option(False, "--no-publish", help="Skip the publish phase"),
    no_changelog: bool = typer.Option(False, "--no-changelog", help="Do not update the changelog"),
    no_commit: bool = typer.Option(False, "--no-commit", help="Do not create a release commit"),
    no_tag: bool = typer.Option(False, "--no-tag", help="Do not create the version tag"),
    no_push: bool = typer.Option(False, "--no-push", help="Do not push commit and tag"),
    no_release: bool = typer.Option(False, "--no-release", help="Do not create a GitHub release"),
    json_output: bool = typer.Option(False, "--json", help="Print the outcome as JSON on stdout"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr"),
    project: Path | None = typer.Option(
        None, "--project", "-C", help="Project directory (default: current directory)"
    ),
) -> None:
    """Test, bump, publish, tag and release the project."""
    ctx = build_context(project, verbose=verbose, quiet_console=json_output)

    options = ShipOptions(
        explicit_version=version,
        bump=bump.kind if bump is not None else "patch",
        conventional=_use_conventional(bump, ctx.config),
        no_changelog=no_changelog,
        no_publish=no_publish,
        no_commit=no_commit,
        no_tag=no_tag,
        no_push=no_push,
        no_release=no_release,
        dry_run=dry_run,
        skip_tests=skip_tests,
    )

    ready = exit_on_ship_error(plan_ship(ctx.project_root, ctx.config, options), ctx.console)
    _print_plan(ctx, ready)

    if not _confirmed(ctx, ready, yes=yes, prompt_on_stderr=json_output):
        ctx.console.warning("aborted, nothing was changed")
        exit_with_code(int(ErrorCode.USER_ERROR))

    outcome = exit_on_ship_error(ready.execute(ProgressPrinter(ctx.console)), ctx.console)

    if json_output:
        typer.echo(json.dumps(outcome.to_dict(), indent=2))
        return
    _print_summary(ctx, outcome)


def _print_plan(ctx: CLIContext, ready: ReadyShip) -> None:
    console = ctx.console
    resolved = ready.version
    mode = " (dry run)" if ready.options.dry_run else ""
    console.header(f"Shipping {resolved.previous} → {resolved.next}{mode}")
    for warning in ready.warnings:
        console.warning(warning)
    hooks = ctx.config.hooks.total
    if hooks:
        console.print(f"{hooks} hook command(s) configured", Style.DIM)


def _confirmed(ctx: CLIContext, ready: ReadyShip, *, yes: bool, prompt_on_stderr: bool) -> bool:
    if yes or ready.options.dry_run or not ctx.config.ship.confirm:
        return True
    return typer.confirm(f"Release {ready.version.next}?", default=False, err=prompt_on_stderr)


def _print_summary(ctx: CLIContext, outcome: ShipOutcome) -> None:
    console = ctx.console
    console.newline()
    if outcome.dry_run:
        console.info(f"dry run complete for {outcome.tag}, nothing was changed")
        return

    console.success(f"Shipped {outcome.tag}")
    if outcome.context.release_url:
        console.print(outcome.context.release_url, Style.DIM)
    if outcome.hooks_run:
        console.print(f"{outcome.hooks_run} hook command(s) ran", Style.DIM)
