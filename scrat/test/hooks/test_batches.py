from __future__ import annotations

from scrat.hooks.batches import Batch, BatchKind, split_batches


def test_no_barrier_yields_one_parallel_batch() -> None:
    batches = split_batches(["echo a", "echo b", "echo c"])
    assert batches == [Batch(BatchKind.PARALLEL, ("echo a", "echo b", "echo c"))]


def test_empty_list_yields_no_batches() -> None:
    assert split_batches([]) == []


def test_barriers_split_parallel_runs() -> None:
    batches = split_batches(["echo a", "echo b", "sync: make docs", "echo c", "filter: ./enrich"])
    assert batches == [
        Batch(BatchKind.PARALLEL, ("echo a", "echo b")),
        Batch(BatchKind.SYNC, ("make docs",)),
        Batch(BatchKind.PARALLEL, ("echo c",)),
        Batch(BatchKind.FILTER, ("./enrich",)),
    ]


def test_all_barriers_yield_solo_batches_in_order() -> None:
    batches = split_batches(["sync:one", "filter:two", "sync: three"])
    assert [(b.kind, b.commands) for b in batches] == [
        (BatchKind.SYNC, ("one",)),
        (BatchKind.FILTER, ("two",)),
        (BatchKind.SYNC, ("three",)),
    ]
    assert all(b.is_barrier for b in batches)


def test_prefix_body_is_left_stripped_only() -> None:
    [batch] = split_batches(["sync:   echo 'x '  "])
    assert batch.commands == ("echo 'x '  ",)


def test_prefix_must_be_at_start() -> None:
    batches = split_batches(["echo sync: not a barrier", " filter: leading space"])
    assert len(batches) == 1
    assert batches[0].kind is BatchKind.PARALLEL


def test_splitting_is_deterministic() -> None:
    commands = ["a", "sync:b", "c", "d", "filter:e", "f"]
    assert split_batches(commands) == split_batches(list(commands))


def test_consecutive_barriers_have_no_empty_parallel_between() -> None:
    batches = split_batches(["echo a", "sync:b", "sync:c", "echo d"])
    assert [b.kind for b in batches] == [
        BatchKind.PARALLEL,
        BatchKind.SYNC,
        BatchKind.SYNC,
        BatchKind.PARALLEL,
    ]
