"""Git operations used by a ship run.

``GitRepository`` wraps the ``git`` CLI for one working tree. Methods that
the orchestrator calls through the ``GitOps`` protocol return
``Result[T, str]``; the lower-level helpers return ``GitError``.

Usage:
    repo = GitRepository(Path("/path/to/repo"))

    match repo.commit_all("chore: release 1.2.3"):
        case Ok(sha):
            print(f"committed {sha}")
        case Err(message):
            print(f"commit failed: {message}")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from scrat.core.result import Err, Ok, Result
from scrat.platform.process import ProcessError
from scrat.platform.process import run as run_process
from scrat.ship.pipeline import ReleaseStats

__all__ = [
    "GitError",
    "GitRepository",
    "parse_owner_repo",
    "parse_porcelain_paths",
]

logger = logging.getLogger(__name__)

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push"})

_RELEASE_BRANCH_CANDIDATES = ("main", "master")


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message (git's stderr when it printed one)
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1

    def __str__(self) -> str:
        return f"git {self.command}: {self.message}"


def parse_owner_repo(url: str) -> tuple[str, str] | None:
    """Extract ``(owner, repo)`` from a GitHub-style remote URL.

    Handles ``https://host/owner/repo(.git)`` and ``git@host:owner/repo(.git)``.
    """
    url = url.strip()
    if url.startswith("git@"):
        _, sep, path = url.partition(":")
        if not sep:
            return None
    else:
        _, sep, rest = url.partition("//")
        if not sep:
            return None
        _, sep, path = rest.partition("/")
        if not sep:
            return None

    path = path.removesuffix(".git").strip("/")
    owner, sep, repo = path.partition("/")
    if not sep or not owner or not repo or "/" in repo:
        return None
    return (owner, repo)


def parse_porcelain_paths(output: str) -> list[str]:
    """Paths listed by ``git status --porcelain`` (rename targets for renames)."""
    paths: list[str] = []
    for line in output.splitlines():
        if len(line) < 4:
            continue
        path = line[3:]
        if " -> " in path:
            path = path.split(" -> ", 1)[1]
        paths.append(path.strip('"'))
    return paths


class GitRepository:
    """Git operations on one repository working tree.

    Attributes:
        path: Path to the working tree (any directory inside it works)
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    # -- queries ------------------------------------------------------------

    def is_inside_repo(self) -> bool:
        result = self._run(["rev-parse", "--is-inside-work-tree"])
        return isinstance(result, Ok) and result.value.strip() == "true"

    def status_paths(self) -> Result[list[str], GitError]:
        result = self._git(["status", "--porcelain"], "status")
        if isinstance(result, Err):
            return result
        return Ok(parse_porcelain_paths(result.value))

    def is_clean(self) -> Result[bool, GitError]:
        paths = self.status_paths()
        if isinstance(paths, Err):
            return paths
        return Ok(not paths.value)

    def current_branch(self) -> str | None:
        """Current branch name, None on detached HEAD or error."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch in ("", "HEAD") else branch
            case Err(_):
                return None

    def detect_release_branch(self) -> str | None:
        """First of ``main``/``master`` that exists locally."""
        for candidate in _RELEASE_BRANCH_CANDIDATES:
            if isinstance(self._run(["rev-parse", "--verify", "--quiet", candidate]), Ok):
                return candidate
        return None

    def is_remote_in_sync(self) -> Result[bool, GitError]:
        """True when HEAD matches its upstream (or there is no upstream)."""
        upstream = self._run(["rev-parse", "--abbrev-ref", "@{upstream}"])
        if isinstance(upstream, Err):
            logger.debug("no upstream tracking branch")
            return Ok(True)

        fetched = self._run(["fetch", "--quiet"])
        if isinstance(fetched, Err):
            logger.debug("git fetch failed, comparing against cached upstream: %s", fetched.error)

        local = self._git(["rev-parse", "HEAD"], "rev-parse")
        if isinstance(local, Err):
            return local
        remote = self._git(["rev-parse", upstream.value.strip()], "rev-parse")
        if isinstance(remote, Err):
            return remote
        return Ok(local.value.strip() == remote.value.strip())

    def version_tags(self) -> list[str]:
        """``v*`` tags, highest version first (empty on error)."""
        result = self._run(["tag", "--list", "v*", "--sort=-version:refname"])
        if isinstance(result, Err):
            return []
        return [line.strip() for line in result.value.splitlines() if line.strip()]

    def remote_url(self, remote: str = "origin") -> str | None:
        result = self._run(["remote", "get-url", remote])
        if isinstance(result, Err):
            return None
        return result.value.strip() or None

    def head_hash(self) -> Result[str, str]:
        result = self._git(["rev-parse", "HEAD"], "rev-parse")
        if isinstance(result, Err):
            return Err(str(result.error))
        return Ok(result.value.strip())

    # -- mutations ----------------------------------------------------------

    def commit_all(self, message: str) -> Result[str, str]:
        added = self._git(["add", "--all"], "add")
        if isinstance(added, Err):
            return Err(str(added.error))

        committed = self._git(["commit", "--message", message], "commit")
        if isinstance(committed, Err):
            return Err(str(committed.error))

        return self.head_hash()

    def create_tag(self, tag: str, message: str) -> Result[None, str]:
        result = self._git(["tag", "--annotate", tag, "--message", message], "tag")
        if isinstance(result, Err):
            return Err(str(result.error))
        return Ok(None)

    def push(self, branch: str, *, tags: bool, remote: str = "origin") -> Result[None, str]:
        args = ["push", remote, branch]
        if tags:
            args.append("--follow-tags")
        result = self._git(args, "push")
        if isinstance(result, Err):
            return Err(str(result.error))
        return Ok(None)

    def release_stats(self, previous_tag: str) -> ReleaseStats | None:
        from scrat.services.stats import compute_stats

        return compute_stats(self, previous_tag)

    # -- plumbing -----------------------------------------------------------

    def log(self, args: list[str]) -> Result[str, GitError]:
        return self._git(["log", *args], "log")

    def shortlog(self, args: list[str]) -> Result[str, GitError]:
        return self._git(["shortlog", *args], "shortlog")

    def diff(self, args: list[str]) -> Result[str, GitError]:
        return self._git(["diff", *args], "diff")

    def _git(self, args: list[str], command: str) -> Result[str, GitError]:
        result = self._run(args)
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command=command,
                        message=e.stderr.strip() or e.stdout.strip() or f"{command} failed",
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok(stdout)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS if command in _NETWORK_COMMANDS else _GIT_TIMEOUT_SECONDS
        )
        logger.debug("git %s", " ".join(args))
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)
