"""Next version from conventional commits, as computed by git-cliff."""

from __future__ import annotations

import logging
from pathlib import Path

from scrat.core.result import Err, Ok, Result
from scrat.platform.process import run as run_process
from scrat.services.semver import SemVer, parse_version

__all__ = ["BUMPED_VERSION_COMMAND", "bumped_version"]

logger = logging.getLogger(__name__)

BUMPED_VERSION_COMMAND = ("git-cliff", "--bumped-version")
BUMPED_VERSION_TIMEOUT_SECONDS = 60.0


def bumped_version(
    project_root: Path, *, timeout: float | None = BUMPED_VERSION_TIMEOUT_SECONDS
) -> Result[SemVer, str]:
    """Ask git-cliff for the version implied by commits since the last tag."""
    out = run_process(list(BUMPED_VERSION_COMMAND), cwd=project_root, timeout=timeout)
    if isinstance(out, Err):
        detail = out.error.stderr.strip() or str(out.error)
        return Err(f"git-cliff could not compute the next version: {detail}")

    # git-cliff may print log lines before the version; the last line wins.
    lines = [line.strip() for line in out.value.splitlines() if line.strip()]
    suggested = lines[-1] if lines else ""
    version = parse_version(suggested)
    if version is None:
        return Err(f"git-cliff suggested an invalid version '{suggested}' (expected X.Y.Z)")
    logger.debug("git-cliff suggested version %s", version)
    return Ok(version)
