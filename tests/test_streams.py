# tests/test_streams.py

from __future__ import annotations

from tasklane.core.streams import StateStream, combine, map_stream


def test_subscribe_replays_current_value_and_emits_changes() -> None:
    s = StateStream(1)
    seen: list[int] = []

    unsub = s.subscribe(seen.append)
    s.set(2)
    s.set(2)  # equal value: no emission
    s.set(3)
    unsub()
    s.set(4)

    assert seen == [1, 2, 3]
    assert s.value == 4


def test_subscribe_without_replay() -> None:
    s = StateStream("a")
    seen: list[str] = []
    s.subscribe(seen.append, replay=False)
    s.set("b")
    assert seen == ["b"]


def test_failing_subscriber_does_not_block_others() -> None:
    s = StateStream(0)
    seen: list[int] = []

    def boom(_value: int) -> None:
        raise RuntimeError("boom")

    s.subscribe(boom, replay=False)
    s.subscribe(seen.append, replay=False)
    s.set(1)

    assert seen == [1]


def test_combine_recomputes_on_any_source() -> None:
    a = StateStream(1)
    b = StateStream(10)
    total = combine([a, b], lambda x, y: x + y)
    seen: list[int] = []
    total.subscribe(seen.append)

    a.set(2)
    b.set(20)

    assert total.value == 22
    assert seen == [11, 12, 22]

    total.close()
    a.set(100)
    assert total.value == 22


def test_map_stream_chains() -> None:
    src = StateStream([3, 1, 2])
    doubled = map_stream(src, lambda xs: [x * 2 for x in xs])
    ordered = map_stream(doubled, sorted)

    src.set([5, 4])

    assert ordered.value == [8, 10]
