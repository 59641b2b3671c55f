from __future__ import annotations

import typer

from scrat import __version__
from scrat.cli.commands.hooks import hooks
from scrat.cli.commands.ship import ship

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Release workflow orchestrator.",
)

app.command()(ship)
app.command()(hooks)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_print_version,
        is_eager=True,
    ),
) -> None:
    pass


def main() -> None:
    app()
