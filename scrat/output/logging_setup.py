"""Logging setup for the CLI.

Engine modules log through ``logging.getLogger(__name__)``; the CLI routes
those records to stderr with Rich so they never mix with ``--json`` output.
"""

from __future__ import annotations

import logging

__all__ = ["LOG_LEVELS", "setup_logging"]

LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def setup_logging(level: str = "info", *, verbose: bool = False) -> logging.Handler:
    """Install a Rich handler on the ``scrat`` logger.

    ``verbose`` forces DEBUG regardless of the configured level. Calling this
    again replaces the previously installed handler.
    """
    from rich.console import Console
    from rich.logging import RichHandler

    numeric = logging.DEBUG if verbose else LOG_LEVELS.get(level.lower(), logging.INFO)

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbose,
        show_path=verbose,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger("scrat")
    for existing in list(root.handlers):
        if isinstance(existing, RichHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(numeric)
    root.propagate = False
    return handler
