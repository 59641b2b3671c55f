from __future__ import annotations

import pytest

from scrat.core.result import Err, Ok
from scrat.services.semver import (
    SemVer,
    latest_stable,
    parse_stable_tag,
    parse_version,
    resolve_version,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1.2.3", SemVer(1, 2, 3)),
        ("v1.2.3", SemVer(1, 2, 3)),
        (" 0.10.0 ", SemVer(0, 10, 0)),
        ("1.2", None),
        ("01.2.3", None),
        ("1.2.3-rc.1", None),
        ("latest", None),
    ],
)
def test_parse_version(text: str, expected: SemVer | None) -> None:
    assert parse_version(text) == expected


def test_stable_tag_requires_prefix() -> None:
    assert parse_stable_tag("v2.0.0") == SemVer(2, 0, 0)
    assert parse_stable_tag("2.0.0") is None
    assert parse_stable_tag("v2.0.0-beta.1") is None


def test_bump_kinds() -> None:
    v = SemVer(1, 4, 7)
    assert v.bump("major") == SemVer(2, 0, 0)
    assert v.bump("minor") == SemVer(1, 5, 0)
    assert v.bump("patch") == SemVer(1, 4, 8)
    assert v.to_tag() == "v1.4.7"


def test_latest_stable_ignores_prereleases_and_noise() -> None:
    tags = ["v1.9.0", "v1.10.0", "v2.0.0-rc.1", "nightly", "v1.10.0-beta"]
    assert latest_stable(tags) == SemVer(1, 10, 0)
    assert latest_stable([]) is None


def test_resolve_bump_from_latest_tag() -> None:
    result = resolve_version(tags=["v0.3.1", "v0.3.0"], explicit=None, bump="minor")

    assert isinstance(result, Ok)
    assert result.value.previous == SemVer(0, 3, 1)
    assert result.value.next == SemVer(0, 4, 0)
    assert result.value.strategy == "minor"
    assert result.value.tagged


def test_resolve_without_tags() -> None:
    result = resolve_version(tags=[], explicit=None)

    assert isinstance(result, Ok)
    assert result.value.previous == SemVer(0, 0, 0)
    assert result.value.next == SemVer(0, 0, 1)
    assert not result.value.tagged


def test_resolve_explicit() -> None:
    result = resolve_version(tags=["v1.0.0"], explicit="v1.1.0")

    assert isinstance(result, Ok)
    assert result.value.next == SemVer(1, 1, 0)
    assert result.value.strategy == "explicit"


def test_resolve_explicit_invalid() -> None:
    result = resolve_version(tags=[], explicit="next")

    assert isinstance(result, Err)
    assert "invalid version 'next'" in result.error


def test_resolve_explicit_not_greater() -> None:
    result = resolve_version(tags=["v1.0.0"], explicit="0.9.0")

    assert isinstance(result, Err)
    assert "must be greater" in result.error


def test_resolve_suggested_from_commits() -> None:
    result = resolve_version(tags=["v1.2.0"], explicit=None, suggested=SemVer(1, 3, 0))

    assert isinstance(result, Ok)
    assert result.value.previous == SemVer(1, 2, 0)
    assert result.value.next == SemVer(1, 3, 0)
    assert result.value.strategy == "conventional"


def test_resolve_explicit_beats_suggested() -> None:
    result = resolve_version(tags=["v1.2.0"], explicit="2.0.0", suggested=SemVer(1, 3, 0))

    assert isinstance(result, Ok)
    assert result.value.next == SemVer(2, 0, 0)
    assert result.value.strategy == "explicit"


def test_resolve_suggested_not_greater() -> None:
    result = resolve_version(tags=["v1.2.0"], explicit=None, suggested=SemVer(1, 2, 0))

    assert isinstance(result, Err)
    assert "not greater than the latest release 1.2.0" in result.error
