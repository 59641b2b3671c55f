"""Interpolation variables for hook commands.

Hook commands may reference ``{version}``, ``{prev_version}``, ``{tag}``,
``{changelog_path}``, ``{owner}`` and ``{repo}``. The camelCase spellings
``{prevVersion}`` and ``{changelogPath}`` are accepted too. Anything else in
braces is left as-is, so shell snippets like ``${HOME}`` or ``jq '{a: 1}'``
pass through untouched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = ["HookContext", "interpolate"]

_TOKEN_RE = re.compile(r"\{([A-Za-z_]+)\}")

_ALIASES = {
    "prevVersion": "prev_version",
    "changelogPath": "changelog_path",
}


@dataclass(frozen=True, slots=True)
class HookContext:
    """Values substituted into hook commands.

    Derived from the pipeline context each time a hook list runs, so a filter
    that rewrites e.g. ``tag`` is seen by every later hook list.
    """

    version: str
    prev_version: str
    tag: str
    changelog_path: str
    owner: str
    repo: str

    def variables(self) -> dict[str, str]:
        return {
            "version": self.version,
            "prev_version": self.prev_version,
            "tag": self.tag,
            "changelog_path": self.changelog_path,
            "owner": self.owner,
            "repo": self.repo,
        }


def interpolate(command: str, context: HookContext) -> str:
    """Replace known ``{var}`` tokens in a single pass.

    Substituted values are never re-scanned, so a value that itself contains
    ``{tag}`` is inserted literally.
    """
    values = context.variables()

    def _sub(match: re.Match[str]) -> str:
        name = _ALIASES.get(match.group(1), match.group(1))
        return values.get(name, match.group(0))

    return _TOKEN_RE.sub(_sub, command)
