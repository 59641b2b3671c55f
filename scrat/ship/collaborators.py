"""Interfaces of the external tools a ship run drives.

The orchestrator only talks to these protocols. ``default_collaborators``
wires up the implementations in ``scrat.services`` (git, gh, git-cliff and
the configured bump command); tests substitute fakes.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from scrat.core.config import Config
from scrat.core.result import Result
from scrat.ship.pipeline import PipelineContext, ReleaseStats

__all__ = [
    "BumpResult",
    "Collaborators",
    "GitOps",
    "NotesRenderer",
    "ReleaseHost",
    "ReleaseRequest",
    "VersionBumper",
    "default_collaborators",
]


@dataclass(frozen=True, slots=True)
class BumpResult:
    modified_files: tuple[str, ...]
    changelog_updated: bool


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """Everything needed to create or edit a hosted release.

    ``notes`` None means let the host generate notes.
    """

    tag: str
    title: str
    draft: bool
    notes: str | None
    assets: tuple[str, ...] = ()
    discussion_category: str | None = None


class VersionBumper(Protocol):
    def bump(self, context: PipelineContext, *, changelog: bool) -> Result[BumpResult, str]:
        """Write the new version into project files (and the changelog)."""
        ...


class GitOps(Protocol):
    def current_branch(self) -> str | None: ...

    def remote_url(self) -> str | None: ...

    def head_hash(self) -> Result[str, str]: ...

    def commit_all(self, message: str) -> Result[str, str]:
        """Stage everything and commit; returns the new commit hash."""
        ...

    def create_tag(self, tag: str, message: str) -> Result[None, str]: ...

    def push(self, branch: str, *, tags: bool) -> Result[None, str]: ...

    def release_stats(self, previous_tag: str) -> ReleaseStats | None: ...


class NotesRenderer(Protocol):
    def render(self, context: PipelineContext) -> Result[str, str]: ...


class ReleaseHost(Protocol):
    def exists(self, tag: str) -> Result[bool, str]: ...

    def create(self, request: ReleaseRequest) -> Result[str | None, str]:
        """Create the release; returns its URL when the host reports one."""
        ...

    def edit(self, request: ReleaseRequest) -> Result[str | None, str]: ...

    def delete_asset(self, tag: str, name: str) -> Result[None, str]: ...

    def upload_asset(self, tag: str, path: str) -> Result[None, str]: ...


@dataclass(frozen=True, slots=True)
class Collaborators:
    bumper: VersionBumper
    git: GitOps
    notes: NotesRenderer
    host: ReleaseHost


def default_collaborators(project_root: Path, config: Config) -> Collaborators:
    from scrat.services.bump import CommandBumper
    from scrat.services.gh import GhReleaseHost
    from scrat.services.git import GitRepository
    from scrat.services.notes import CliffNotesRenderer

    repo = GitRepository(project_root)
    return Collaborators(
        bumper=CommandBumper(project_root, config.commands, repo=repo),
        git=repo,
        notes=CliffNotesRenderer(project_root, template=config.release.notes_template),
        host=GhReleaseHost(project_root),
    )
