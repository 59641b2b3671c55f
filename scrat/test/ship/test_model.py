from __future__ import annotations

import json

from scrat.core.errors import ErrorCode
from scrat.hooks.errors import CommandFailed, FilterOutputInvalid, ToolExecFailed
from scrat.ship.errors import PhaseFailed, PreflightFailed, ship_error_code
from scrat.ship.model import PHASE_ORDER, ShipOutcome, ShipPhase, Skipped, Success
from scrat.ship.pipeline import PipelineContext


def _outcome() -> ShipOutcome:
    ctx = PipelineContext(
        version="1.0.1",
        previous_version="1.0.0",
        tag="v1.0.1",
        previous_tag="v1.0.0",
        owner="acme",
        repo="widget",
        ecosystem="unknown",
        date="2026-05-01",
    )
    return ShipOutcome(
        version="1.0.1",
        previous_version="1.0.0",
        tag="v1.0.1",
        phases=(
            (ShipPhase.PREFLIGHT, Success("All preflight checks passed")),
            (ShipPhase.TEST, Skipped("--skip-tests flag")),
        ),
        hooks_run=2,
        dry_run=False,
        context=ctx,
    )


def test_phase_order() -> None:
    assert [str(p) for p in PHASE_ORDER] == [
        "preflight",
        "version",
        "test",
        "bump",
        "publish",
        "git",
        "release",
    ]


def test_outcome_lookup() -> None:
    outcome = _outcome()
    assert outcome.outcome_for(ShipPhase.TEST) == Skipped("--skip-tests flag")
    assert outcome.outcome_for(ShipPhase.RELEASE) is None


def test_outcome_to_dict_is_json_serializable() -> None:
    data = _outcome().to_dict()

    assert data["phases"] == [
        ["preflight", {"status": "success", "message": "All preflight checks passed"}],
        ["test", {"status": "skipped", "reason": "--skip-tests flag"}],
    ]
    assert data["hooks_run"] == 2
    assert json.loads(json.dumps(data))["context"]["tag"] == "v1.0.1"


def test_error_messages() -> None:
    assert str(PreflightFailed(("a", "b"))) == "preflight checks failed: a; b"
    assert str(PhaseFailed(ShipPhase.BUMP, "boom")) == "bump phase failed: boom"
    assert str(CommandFailed("false", 1, "")) == "hook command failed (exit 1): false"
    assert "timed out" in str(CommandFailed("sleep 9", None, ""))


def test_error_exit_codes() -> None:
    assert ship_error_code(PreflightFailed(("x",))) is ErrorCode.USER_ERROR
    assert ship_error_code(PhaseFailed(ShipPhase.GIT, "x")) is ErrorCode.BUILD_ERROR
    assert ship_error_code(CommandFailed("false", 1, "")) is ErrorCode.BUILD_ERROR
    assert ship_error_code(FilterOutputInvalid("jq .", "bad")) is ErrorCode.BUILD_ERROR
    assert ship_error_code(ToolExecFailed("x", "no such dir")) is ErrorCode.ENV_ERROR
