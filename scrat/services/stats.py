"""Release statistics between the previous tag and HEAD.

Stats are decoration for release notes: any git failure (e.g. the previous
tag does not exist on a first release) yields None instead of an error.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from scrat.core.result import Err
from scrat.ship.pipeline import Contributor, ReleaseStats

if TYPE_CHECKING:
    from scrat.services.git import GitRepository

__all__ = ["CONTRIBUTOR_LIMIT", "compute_stats", "parse_shortlog", "parse_shortstat"]

logger = logging.getLogger(__name__)

CONTRIBUTOR_LIMIT = 20

_SHORTSTAT_RE = {
    "files_changed": re.compile(r"(\d+) files? changed"),
    "insertions": re.compile(r"(\d+) insertions?\(\+\)"),
    "deletions": re.compile(r"(\d+) deletions?\(-\)"),
}


def parse_shortstat(output: str) -> tuple[int, int, int]:
    """Parse ``git diff --shortstat`` into (files_changed, insertions, deletions)."""
    values: list[int] = []
    for pattern in _SHORTSTAT_RE.values():
        m = pattern.search(output)
        values.append(int(m.group(1)) if m else 0)
    return (values[0], values[1], values[2])


def parse_shortlog(output: str, limit: int = CONTRIBUTOR_LIMIT) -> list[Contributor]:
    """Parse ``git shortlog -sn`` lines (``   12\\tName``), keeping the first ``limit``."""
    out: list[Contributor] = []
    for line in output.splitlines():
        count_text, sep, name = line.strip().partition("\t")
        if not sep or not count_text.isdigit() or not name.strip():
            continue
        out.append(Contributor(name=name.strip(), count=int(count_text)))
        if len(out) >= limit:
            break
    return out


def compute_stats(repo: GitRepository, previous_tag: str) -> ReleaseStats | None:
    revision_range = f"{previous_tag}..HEAD"

    commits = repo.log(["--format=%H", revision_range])
    if isinstance(commits, Err):
        logger.warning("failed to gather release stats, skipping: %s", commits.error)
        return None

    diff = repo.diff(["--shortstat", revision_range])
    if isinstance(diff, Err):
        logger.warning("failed to gather release stats, skipping: %s", diff.error)
        return None
    files_changed, insertions, deletions = parse_shortstat(diff.value)

    shortlog = repo.shortlog(["-sn", "--no-merges", revision_range])
    if isinstance(shortlog, Err):
        logger.warning("failed to gather contributors, continuing without: %s", shortlog.error)
        contributors: list[Contributor] = []
    else:
        contributors = parse_shortlog(shortlog.value)

    return ReleaseStats(
        commit_count=len([line for line in commits.value.splitlines() if line.strip()]),
        files_changed=files_changed,
        insertions=insertions,
        deletions=deletions,
        contributors=tuple(contributors),
    )
