from __future__ import annotations

import json
import shlex
import sys
from pathlib import Path

from scrat.core.result import Err, Ok
from scrat.hooks import CommandFailed, FilterOutputInvalid, HookContext, run_hooks

CTX = HookContext(
    version="1.2.3",
    prev_version="1.2.2",
    tag="v1.2.3",
    changelog_path="CHANGELOG.md",
    owner="acme",
    repo="widget",
)


def _py_filter(code: str) -> str:
    return f"filter: {shlex.quote(sys.executable)} -c {shlex.quote(code)}"


def _set_key(key: str) -> str:
    return _py_filter(
        "import json,sys; d=json.load(sys.stdin); "
        f"d[{key!r}]=d.get('n', 0); d['n']=d.get('n', 0)+1; print(json.dumps(d))"
    )


def test_empty_list_is_a_no_op(tmp_path: Path) -> None:
    result = run_hooks([], context=CTX, cwd=tmp_path)

    assert isinstance(result, Ok)
    assert result.value.outputs == ()
    assert not result.value.context_changed


def test_mixed_list_reports_every_command(tmp_path: Path) -> None:
    result = run_hooks(
        ["echo first", "sync:echo barrier", "echo last"],
        context=CTX,
        cwd=tmp_path,
        context_json='{"version": "1.2.3"}',
    )

    assert isinstance(result, Ok)
    outputs = result.value.outputs
    assert len(outputs) == 3
    assert all(o.success for o in outputs)
    assert [o.stdout.strip() for o in outputs] == ["first", "barrier", "last"]
    assert result.value.context_json is None


def test_failure_stops_later_batches(tmp_path: Path) -> None:
    marker = tmp_path / "after"
    result = run_hooks(["false", f"sync:echo after > {marker}"], context=CTX, cwd=tmp_path)

    assert isinstance(result, Err)
    assert isinstance(result.error, CommandFailed)
    assert result.error.command == "false"
    assert not marker.exists()


def test_barrier_waits_for_parallel_batch(tmp_path: Path) -> None:
    log = tmp_path / "log"
    result = run_hooks(
        [f"sleep 0.2; echo a >> {log}", f"echo b >> {log}", f"sync:echo barrier >> {log}"],
        context=CTX,
        cwd=tmp_path,
    )

    assert isinstance(result, Ok)
    lines = log.read_text().split()
    assert lines[-1] == "barrier"
    assert sorted(lines[:2]) == ["a", "b"]


def test_filter_adds_key(tmp_path: Path) -> None:
    code = "import json,sys; d=json.load(sys.stdin); d['added']=True; print(json.dumps(d))"
    result = run_hooks(
        [_py_filter(code)],
        context=CTX,
        cwd=tmp_path,
        context_json='{"version":"1.0.0"}',
    )

    assert isinstance(result, Ok)
    assert result.value.context_changed
    assert result.value.context_json is not None
    assert json.loads(result.value.context_json) == {"version": "1.0.0", "added": True}


def test_filters_chain_their_output(tmp_path: Path) -> None:
    chained = run_hooks(
        [_set_key("first"), "echo between", _set_key("second")],
        context=CTX,
        cwd=tmp_path,
        context_json='{"version": "1.0.0"}',
    )
    first_only = run_hooks(
        [_set_key("first")], context=CTX, cwd=tmp_path, context_json='{"version": "1.0.0"}'
    )

    assert isinstance(chained, Ok)
    assert isinstance(first_only, Ok)
    assert first_only.value.context_json is not None
    second_only = run_hooks(
        [_set_key("second")],
        context=CTX,
        cwd=tmp_path,
        context_json=first_only.value.context_json,
    )
    assert isinstance(second_only, Ok)
    assert chained.value.context_json is not None
    assert second_only.value.context_json is not None
    assert json.loads(chained.value.context_json) == json.loads(second_only.value.context_json)
    assert json.loads(chained.value.context_json) == {
        "version": "1.0.0",
        "first": 0,
        "second": 1,
        "n": 2,
    }


def test_invalid_filter_output_fails(tmp_path: Path) -> None:
    result = run_hooks(["filter: echo not-json"], context=CTX, cwd=tmp_path, context_json="{}")

    assert isinstance(result, Err)
    assert isinstance(result.error, FilterOutputInvalid)


def test_timeout_applies_per_command(tmp_path: Path) -> None:
    result = run_hooks(["echo ok", "sync:sleep 5"], context=CTX, cwd=tmp_path, timeout=0.3)

    assert isinstance(result, Err)
    assert isinstance(result.error, CommandFailed)
    assert result.error.exit_code is None
