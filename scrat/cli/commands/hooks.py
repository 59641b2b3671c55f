"""Hooks command: show configured hooks and how they are batched."""

from __future__ import annotations

from pathlib import Path

import typer

from scrat.cli.context import build_context
from scrat.core.config import HOOK_NAMES
from scrat.hooks.batches import BatchKind, split_batches
from scrat.output.console import ConsoleProtocol, Style


def hooks(
    project: Path | None = typer.Option(
        None, "--project", "-C", help="Project directory (default: current directory)"
    ),
) -> None:
    """List configured hooks and their execution batches."""
    ctx = build_context(project)
    config = ctx.config.hooks

    if config.total == 0:
        ctx.console.info("no hooks configured")
        return

    for name in HOOK_NAMES:
        commands = config.commands_for(name)
        if commands:
            print_hook_list(ctx.console, name, commands)

    if config.timeout is not None:
        ctx.console.newline()
        ctx.console.print(f"timeout: {config.timeout:g}s per command", Style.DIM)


def print_hook_list(console: ConsoleProtocol, name: str, commands: tuple[str, ...]) -> None:
    console.header(name)
    for index, batch in enumerate(split_batches(commands), start=1):
        if batch.kind is BatchKind.PARALLEL and len(batch.commands) > 1:
            label = f"{batch.kind} x{len(batch.commands)}"
        else:
            label = str(batch.kind)
        console.print(f"{index}. {label}", Style.BOLD)
        for command in batch.commands:
            console.print(f"   $ {command}")
