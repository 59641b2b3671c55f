"""Pipeline context: the accumulator for one ship run.

Every phase writes its results into a ``PipelineContext``. The context is
used three ways:

1. ``filter:`` hooks receive it as JSON on stdin and print a rewritten copy
2. release notes rendering receives its stats, deps and metadata
3. the ship outcome carries it for machine-readable CLI output

Version fields are plain strings so JSON round-trips through external
processes need no semver-aware parsing.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from scrat.core.result import Err, Ok, Result
from scrat.core.structured import StrDict, as_obj_list, as_str_dict, as_str_list
from scrat.hooks.context import HookContext

__all__ = [
    "Contributor",
    "DepChange",
    "PipelineContext",
    "ReleaseStats",
    "iso_date_today",
]

JsonValue = Any


def iso_date_today(now: datetime | None = None) -> str:
    """Return the current UTC date as ``YYYY-MM-DD``."""
    return (now or datetime.now(UTC)).astimezone(UTC).strftime("%Y-%m-%d")


@dataclass(frozen=True, slots=True)
class Contributor:
    name: str
    count: int


@dataclass(frozen=True, slots=True)
class ReleaseStats:
    """Statistics gathered from git between the previous tag and HEAD."""

    commit_count: int
    files_changed: int
    insertions: int
    deletions: int
    contributors: tuple[Contributor, ...] = ()

    def to_dict(self) -> StrDict:
        return {
            "commit_count": self.commit_count,
            "files_changed": self.files_changed,
            "insertions": self.insertions,
            "deletions": self.deletions,
            "contributors": [{"name": c.name, "count": c.count} for c in self.contributors],
        }


@dataclass(frozen=True, slots=True)
class DepChange:
    """A dependency change; ``from_version`` None means added, ``to_version`` None removed."""

    name: str
    from_version: str | None
    to_version: str | None

    def to_dict(self) -> StrDict:
        return {"name": self.name, "from": self.from_version, "to": self.to_version}


class _ShapeError(ValueError):
    pass


def _req_str(data: StrDict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise _ShapeError(f"'{key}' must be a string")
    return value


def _opt_str(data: StrDict, key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise _ShapeError(f"'{key}' must be a string or null")
    return value


def _bool(data: StrDict, key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise _ShapeError(f"'{key}' must be a boolean")
    return value


def _count(data: StrDict, key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise _ShapeError(f"'{key}' must be a non-negative integer")
    return value


def _str_list(data: StrDict, key: str) -> list[str]:
    if key not in data:
        return []
    value = as_str_list(data[key])
    if value is None:
        raise _ShapeError(f"'{key}' must be a list of strings")
    return value


def _stats(data: StrDict) -> ReleaseStats | None:
    raw = data.get("stats")
    if raw is None:
        return None
    table = as_str_dict(raw)
    if table is None:
        raise _ShapeError("'stats' must be an object or null")

    contributors: list[Contributor] = []
    for item in as_obj_list(table.get("contributors", [])) or []:
        entry = as_str_dict(item)
        if entry is None:
            raise _ShapeError("'stats.contributors' entries must be objects")
        contributors.append(Contributor(name=_req_str(entry, "name"), count=_count(entry, "count")))

    return ReleaseStats(
        commit_count=_count(table, "commit_count"),
        files_changed=_count(table, "files_changed"),
        insertions=_count(table, "insertions"),
        deletions=_count(table, "deletions"),
        contributors=tuple(contributors),
    )


def _dependencies(data: StrDict) -> list[DepChange]:
    raw = as_obj_list(data.get("dependencies", []))
    if raw is None:
        raise _ShapeError("'dependencies' must be a list")
    out: list[DepChange] = []
    for item in raw:
        entry = as_str_dict(item)
        if entry is None:
            raise _ShapeError("'dependencies' entries must be objects")
        out.append(
            DepChange(
                name=_req_str(entry, "name"),
                from_version=_opt_str(entry, "from"),
                to_version=_opt_str(entry, "to"),
            )
        )
    return out


@dataclass(slots=True)
class PipelineContext:
    """Structured state of one release run.

    Phase output fields start empty and are filled in by exactly one phase
    through the ``record_*`` methods.
    """

    # Version
    version: str
    previous_version: str
    tag: str
    previous_tag: str
    # Repository
    owner: str
    repo: str
    # Project
    ecosystem: str
    date: str = field(default_factory=iso_date_today)
    repo_url: str | None = None
    branch: str | None = None
    # Phase outputs
    stats: ReleaseStats | None = None
    dependencies: list[DepChange] = field(default_factory=list)
    changelog_updated: bool = False
    changelog_path: str = ""
    modified_files: list[str] = field(default_factory=list)
    commit_hash: str | None = None
    release_url: str | None = None
    assets: list[str] = field(default_factory=list)
    release_notes: str | None = None
    # Free-form data contributed by hooks
    metadata: dict[str, JsonValue] = field(default_factory=dict)
    dry_run: bool = False

    def hook_context(self) -> HookContext:
        """Derive the interpolation variables for hook commands."""
        return HookContext(
            version=self.version,
            prev_version=self.previous_version,
            tag=self.tag,
            changelog_path=self.changelog_path,
            owner=self.owner,
            repo=self.repo,
        )

    def record_bump(self, changelog_updated: bool, modified_files: list[str]) -> None:
        self.changelog_updated = changelog_updated
        self.modified_files = list(modified_files)

    def record_git(self, commit_hash: str | None, branch: str | None) -> None:
        """Record the git phase; a None branch keeps the one detected at start."""
        self.commit_hash = commit_hash
        if branch is not None:
            self.branch = branch

    def record_release(self, url: str | None) -> None:
        self.release_url = url

    def record_notes(self, notes: str | None) -> None:
        self.release_notes = notes

    def set_assets(self, assets: list[str]) -> None:
        self.assets = list(assets)

    # -- JSON ---------------------------------------------------------------

    def to_dict(self) -> StrDict:
        return {
            "version": self.version,
            "previous_version": self.previous_version,
            "tag": self.tag,
            "previous_tag": self.previous_tag,
            "date": self.date,
            "owner": self.owner,
            "repo": self.repo,
            "repo_url": self.repo_url,
            "branch": self.branch,
            "ecosystem": self.ecosystem,
            "stats": self.stats.to_dict() if self.stats is not None else None,
            "dependencies": [d.to_dict() for d in self.dependencies],
            "changelog_updated": self.changelog_updated,
            "changelog_path": self.changelog_path,
            "modified_files": list(self.modified_files),
            "commit_hash": self.commit_hash,
            "release_url": self.release_url,
            "assets": list(self.assets),
            "release_notes": self.release_notes,
            "metadata": dict(self.metadata),
            "dry_run": self.dry_run,
        }

    def to_json(self, *, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: StrDict) -> Result[PipelineContext, str]:
        """Rebuild a context from its JSON object form.

        Top-level keys that are not context fields (a filter that did
        ``.foo = 1``) are kept by moving them into ``metadata``.
        """
        try:
            metadata_obj = data.get("metadata", {})
            metadata = as_str_dict(metadata_obj)
            if metadata is None:
                raise _ShapeError("'metadata' must be an object")
            metadata = dict(metadata)

            known = _FIELD_NAMES
            for key, value in data.items():
                if key not in known:
                    metadata[key] = value

            ctx = cls(
                version=_req_str(data, "version"),
                previous_version=_req_str(data, "previous_version"),
                tag=_req_str(data, "tag"),
                previous_tag=_req_str(data, "previous_tag"),
                owner=_req_str(data, "owner"),
                repo=_req_str(data, "repo"),
                ecosystem=_req_str(data, "ecosystem"),
                date=_req_str(data, "date"),
                repo_url=_opt_str(data, "repo_url"),
                branch=_opt_str(data, "branch"),
                stats=_stats(data),
                dependencies=_dependencies(data),
                changelog_updated=_bool(data, "changelog_updated", False),
                changelog_path=_opt_str(data, "changelog_path") or "",
                modified_files=_str_list(data, "modified_files"),
                commit_hash=_opt_str(data, "commit_hash"),
                release_url=_opt_str(data, "release_url"),
                assets=_str_list(data, "assets"),
                release_notes=_opt_str(data, "release_notes"),
                metadata=metadata,
                dry_run=_bool(data, "dry_run", False),
            )
        except _ShapeError as e:
            return Err(str(e))
        return Ok(ctx)

    @classmethod
    def from_json(cls, text: str) -> Result[PipelineContext, str]:
        try:
            obj: object = json.loads(text)
        except json.JSONDecodeError as e:
            return Err(f"invalid JSON: {e}")
        data = as_str_dict(obj)
        if data is None:
            return Err("pipeline context must be a JSON object")
        return cls.from_dict(data)


_FIELD_NAMES = frozenset(PipelineContext.__dataclass_fields__)
