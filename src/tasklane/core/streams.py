# src/tasklane/core/streams.py

"""
Minimal push-based value streams.

A stream always has a current value. Subscribers are called synchronously, in
subscription order, every time the value is replaced by a different one.
Derived streams (combine / map_stream) recompute eagerly on any source change.

Streams are not thread-safe: publish only from the event-loop thread.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, Generic, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)
R = TypeVar("R")

Unsubscribe = Callable[[], None]


class Stream(Protocol[T_co]):
    @property
    def value(self) -> T_co: ...

    def subscribe(self, callback: Callable[[T_co], None], *, replay: bool = True) -> Unsubscribe: ...


class StateStream(Generic[T]):
    """Holds the latest value and pushes every change to subscribers."""

    def __init__(self, initial: T, *, name: str = "") -> None:
        self._value = initial
        self._name = name or "stream"
        self._subscribers: list[Callable[[T], None]] = []

    def __repr__(self) -> str:
        return f"StateStream({self._name}, subscribers={len(self._subscribers)})"

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        if value == self._value:
            return
        self._value = value
        self._emit(value)

    def subscribe(self, callback: Callable[[T], None], *, replay: bool = True) -> Unsubscribe:
        self._subscribers.append(callback)
        if replay:
            self._deliver(callback, self._value)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def _emit(self, value: T) -> None:
        # Copy: a callback may unsubscribe itself while we iterate.
        for cb in list(self._subscribers):
            self._deliver(cb, value)

    def _deliver(self, callback: Callable[[T], None], value: T) -> None:
        try:
            callback(value)
        except Exception:
            logger.exception("Subscriber of %s failed", self._name)


class DerivedStream(Generic[R]):
    """Read-only stream computed from the latest values of its sources."""

    def __init__(
        self,
        sources: Sequence[Stream[Any]],
        fn: Callable[..., R],
        *,
        name: str = "",
    ) -> None:
        self._sources = list(sources)
        self._fn = fn
        self._ready = False
        self._state: StateStream[R] = StateStream(self._compute(), name=name or "derived")
        # replay=False: the initial value was computed above.
        self._unsubs = [s.subscribe(self._on_source, replay=False) for s in self._sources]
        self._ready = True

    @property
    def value(self) -> R:
        return self._state.value

    def subscribe(self, callback: Callable[[R], None], *, replay: bool = True) -> Unsubscribe:
        return self._state.subscribe(callback, replay=replay)

    def close(self) -> None:
        for unsub in self._unsubs:
            unsub()
        self._unsubs = []

    def _compute(self) -> R:
        return self._fn(*(s.value for s in self._sources))

    def _on_source(self, _value: Any) -> None:
        if not self._ready:
            return
        self._state.set(self._compute())


def combine(sources: Sequence[Stream[Any]], fn: Callable[..., R], *, name: str = "") -> DerivedStream[R]:
    """`fn` receives the current value of each source, positionally."""
    return DerivedStream(sources, fn, name=name)


def map_stream(source: Stream[T], fn: Callable[[T], R], *, name: str = "") -> DerivedStream[R]:
    return DerivedStream([source], fn, name=name)
