from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from scrat.core.config import Config, load_project_config
from scrat.core.errors import ErrorCode
from scrat.core.result import Err
from scrat.output.console import ConsoleProtocol, RichConsole
from scrat.output.logging_setup import setup_logging


@dataclass(frozen=True, slots=True)
class CLIContext:
    project_root: Path
    config: Config
    console: ConsoleProtocol


def build_context(
    project: Path | None = None,
    *,
    verbose: bool = False,
    quiet_console: bool = False,
) -> CLIContext:
    """Resolve the project root, load its config and set up logging.

    ``quiet_console`` routes human-readable output to stderr (used with
    ``--json`` so stdout only carries the JSON document).
    """
    console = RichConsole(stderr=quiet_console)
    try:
        root = (project or Path.cwd()).expanduser().resolve()
    except OSError as e:
        console.error(f"invalid project directory: {e}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if not root.is_dir():
        console.error(f"project directory does not exist: {root}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config_result = load_project_config(root)
    if isinstance(config_result, Err):
        console.error(str(config_result.error))
        raise typer.Exit(code=int(ErrorCode.IO_ERROR))

    config = config_result.value
    setup_logging(config.log_level, verbose=verbose)
    return CLIContext(project_root=root, config=config, console=console)
