"""Semantic versions: parsing, tag selection and next-version resolution."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from scrat.core.result import Err, Ok, Result
from scrat.ship.model import BumpKind

__all__ = [
    "ResolvedVersion",
    "SemVer",
    "latest_stable",
    "parse_stable_tag",
    "parse_version",
    "resolve_version",
]

_VERSION_RE = re.compile(r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")
_STABLE_TAG_RE = re.compile(r"^v(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def to_tag(self) -> str:
        return f"v{self}"

    def bump(self, kind: BumpKind) -> SemVer:
        match kind:
            case "major":
                return SemVer(self.major + 1, 0, 0)
            case "minor":
                return SemVer(self.major, self.minor + 1, 0)
            case "patch":
                return SemVer(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")


ZERO = SemVer(0, 0, 0)


def parse_version(text: str) -> SemVer | None:
    """Parse ``X.Y.Z`` or ``vX.Y.Z``."""
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def parse_stable_tag(tag: str) -> SemVer | None:
    m = _STABLE_TAG_RE.match(tag)
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def latest_stable(tags: Iterable[str]) -> SemVer | None:
    versions = [v for v in (parse_stable_tag(t) for t in tags) if v is not None]
    return max(versions, default=None)


@dataclass(frozen=True, slots=True)
class ResolvedVersion:
    previous: SemVer
    next: SemVer
    # "explicit", "conventional" or the bump kind; shown in the version phase message.
    strategy: str
    # False when no vX.Y.Z tag exists yet (previous is 0.0.0).
    tagged: bool = True


def resolve_version(
    *,
    tags: Iterable[str],
    explicit: str | None,
    bump: BumpKind = "patch",
    suggested: SemVer | None = None,
) -> Result[ResolvedVersion, str]:
    """Pick the next version: ``explicit`` wins, then ``suggested`` (from
    conventional commits), else bump the latest stable tag.

    Without any ``vX.Y.Z`` tag the previous version is ``0.0.0``.
    """
    latest = latest_stable(tags)
    previous = latest or ZERO
    tagged = latest is not None

    if explicit is not None:
        version = parse_version(explicit)
        if version is None:
            return Err(f"invalid version '{explicit}' (expected X.Y.Z)")
        if version <= previous:
            return Err(f"version {version} must be greater than the latest release {previous}")
        return Ok(
            ResolvedVersion(previous=previous, next=version, strategy="explicit", tagged=tagged)
        )

    if suggested is not None:
        if suggested <= previous:
            return Err(
                f"conventional commits suggest {suggested}, which is not greater than "
                f"the latest release {previous} (no releasable commits?)"
            )
        return Ok(
            ResolvedVersion(
                previous=previous, next=suggested, strategy="conventional", tagged=tagged
            )
        )

    return Ok(
        ResolvedVersion(previous=previous, next=previous.bump(bump), strategy=bump, tagged=tagged)
    )
