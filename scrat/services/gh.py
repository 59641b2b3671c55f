"""GitHub releases through the ``gh`` CLI.

Reads (``gh release view``) are idempotent and retried on transient network
errors; writes are attempted once.
"""

from __future__ import annotations

import logging
from pathlib import Path
from time import sleep

from scrat.core.result import Err, Ok, Result
from scrat.platform.process import ProcessError
from scrat.platform.process import run as run_process
from scrat.ship.collaborators import ReleaseRequest

__all__ = ["GhReleaseHost", "is_transient_gh_error", "run_gh_read"]

logger = logging.getLogger(__name__)

GH_TIMEOUT_SECONDS = 60.0
GH_UPLOAD_TIMEOUT_SECONDS = 15 * 60.0
GH_READ_RETRY_ATTEMPTS = 3
GH_READ_RETRY_DELAY_SECONDS = 1.0

_NOT_FOUND_MARKERS = ("release not found", "http 404")


def is_transient_gh_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "gateway timeout",
        "tls handshake timeout",
        "network is unreachable",
        "http 429",
        "http 500",
        "http 502",
        "http 503",
        "http 504",
    )
    if error.kind == "timeout":
        return True
    return any(marker in text for marker in markers)


def run_gh_read(
    *,
    project_root: Path,
    cmd: list[str],
    timeout: float = GH_TIMEOUT_SECONDS,
    retry_attempts: int = GH_READ_RETRY_ATTEMPTS,
) -> Result[str, ProcessError]:
    attempts = max(1, retry_attempts)
    result: Result[str, ProcessError] = run_process(cmd, cwd=project_root, timeout=timeout)
    for attempt in range(1, attempts):
        if isinstance(result, Ok) or not is_transient_gh_error(result.error):
            break
        logger.debug(
            "transient gh error, retrying (%d/%d): %s", attempt, attempts - 1, result.error
        )
        sleep(GH_READ_RETRY_DELAY_SECONDS * attempt)
        result = run_process(cmd, cwd=project_root, timeout=timeout)
    return result


def _error_text(error: ProcessError) -> str:
    return error.stderr.strip() or error.stdout.strip() or str(error)


def _url_from(stdout: str) -> str | None:
    # gh prints the release URL as the last line.
    lines = [line.strip() for line in stdout.splitlines() if line.strip()]
    return lines[-1] if lines else None


class GhReleaseHost:
    """``ReleaseHost`` backed by ``gh release``."""

    def __init__(self, project_root: Path) -> None:
        self.project_root = project_root

    def exists(self, tag: str) -> Result[bool, str]:
        result = run_gh_read(
            project_root=self.project_root,
            cmd=["gh", "release", "view", tag, "--json", "url"],
        )
        if isinstance(result, Ok):
            return Ok(True)

        text = _error_text(result.error)
        if any(marker in text.lower() for marker in _NOT_FOUND_MARKERS):
            return Ok(False)
        return Err(f"gh release view failed: {text}")

    def create(self, request: ReleaseRequest) -> Result[str | None, str]:
        cmd = ["gh", "release", "create", request.tag, "--title", request.title]
        if request.draft:
            cmd.append("--draft")
        if request.notes is None:
            cmd.append("--generate-notes")
        else:
            cmd.extend(["--notes", request.notes])
        if request.discussion_category:
            cmd.extend(["--discussion-category", request.discussion_category])
        cmd.extend(request.assets)

        logger.debug("creating GitHub release %s (%d asset(s))", request.tag, len(request.assets))
        result = run_process(cmd, cwd=self.project_root, timeout=GH_UPLOAD_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(f"gh release create failed: {_error_text(result.error)}")
        return Ok(_url_from(result.value))

    def edit(self, request: ReleaseRequest) -> Result[str | None, str]:
        cmd = [
            "gh",
            "release",
            "edit",
            request.tag,
            "--title",
            request.title,
            f"--draft={'true' if request.draft else 'false'}",
        ]
        if request.notes is not None:
            cmd.extend(["--notes", request.notes])

        logger.debug("editing GitHub release %s", request.tag)
        result = run_process(cmd, cwd=self.project_root, timeout=GH_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(f"gh release edit failed: {_error_text(result.error)}")
        return Ok(_url_from(result.value))

    def delete_asset(self, tag: str, name: str) -> Result[None, str]:
        result = run_process(
            ["gh", "release", "delete-asset", tag, name, "--yes"],
            cwd=self.project_root,
            timeout=GH_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return Err(f"gh release delete-asset failed: {_error_text(result.error)}")
        return Ok(None)

    def upload_asset(self, tag: str, path: str) -> Result[None, str]:
        result = run_process(
            ["gh", "release", "upload", tag, path],
            cwd=self.project_root,
            timeout=GH_UPLOAD_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return Err(f"gh release upload failed for {path}: {_error_text(result.error)}")
        return Ok(None)
