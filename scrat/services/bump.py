"""Version bump through configured shell commands.

Project manifests are never parsed here: ``commands.bump`` (e.g.
``uv version {version}`` or ``npm version {version} --no-git-tag-version``)
writes the version, ``commands.changelog`` updates the changelog. Without a
changelog command, git-cliff is used when it is installed. Modified files
are read back from ``git status``.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from scrat.core.config import CommandsConfig
from scrat.core.result import Err, Ok, Result
from scrat.hooks.context import interpolate
from scrat.platform.process import run_shell
from scrat.services.git import GitRepository
from scrat.ship.collaborators import BumpResult
from scrat.ship.pipeline import PipelineContext

__all__ = ["DEFAULT_CHANGELOG_COMMAND", "CommandBumper"]

logger = logging.getLogger(__name__)

DEFAULT_CHANGELOG_COMMAND = "git-cliff --output {changelog_path} --tag {tag}"


class CommandBumper:
    """``VersionBumper`` that runs the configured bump/changelog commands."""

    def __init__(
        self, project_root: Path, commands: CommandsConfig, *, repo: GitRepository
    ) -> None:
        self.project_root = project_root
        self.commands = commands
        self.repo = repo

    def changelog_command(self) -> str | None:
        if self.commands.changelog is not None:
            return self.commands.changelog
        if shutil.which("git-cliff") is not None:
            return DEFAULT_CHANGELOG_COMMAND
        return None

    def bump(self, context: PipelineContext, *, changelog: bool) -> Result[BumpResult, str]:
        hook_ctx = context.hook_context()

        if self.commands.bump is not None:
            ran = self._run("bump", interpolate(self.commands.bump, hook_ctx))
            if isinstance(ran, Err):
                return ran
        else:
            logger.debug("no bump command configured, leaving project files untouched")

        changelog_updated = False
        if changelog:
            command = self.changelog_command()
            if command is None:
                logger.debug("no changelog command configured and git-cliff not found, skipping")
            else:
                ran = self._run("changelog", interpolate(command, hook_ctx))
                if isinstance(ran, Err):
                    return ran
                changelog_updated = True

        paths = self.repo.status_paths()
        if isinstance(paths, Err):
            return Err(str(paths.error))
        return Ok(
            BumpResult(modified_files=tuple(paths.value), changelog_updated=changelog_updated)
        )

    def _run(self, what: str, command: str) -> Result[None, str]:
        logger.debug("running %s command: %s", what, command)
        result = run_shell(command, self.project_root, timeout=self.commands.timeout)
        if isinstance(result, Err):
            return Err(f"failed to execute {what} command: {result.error.stderr}")

        done = result.value
        if done.timed_out:
            return Err(f"{what} command timed out: {command}")
        if not done.ok:
            return Err(f"{what} command failed (exit {done.returncode}): {done.stderr.strip()}")
        return Ok(None)
