# src/tasklane/tasks/pending.py

from __future__ import annotations

import asyncio
import logging

from ..core.streams import StateStream, Stream
from .task_models import Task

logger = logging.getLogger(__name__)


class PendingUpdates:
    """
    Optimistic overlay: task id -> version not yet confirmed by the store.

    Each entry lives for `settle_seconds` after its last `put`, whether or not
    the backing write has finished. Callers evict earlier on delete or on a
    failed write. Must be used from a running event loop.
    """

    def __init__(self, *, settle_seconds: float = 0.5) -> None:
        self._settle_seconds = max(0.0, float(settle_seconds))
        self._entries: StateStream[dict[int, Task]] = StateStream({}, name="pending")
        self._timers: dict[int, asyncio.TimerHandle] = {}

    @property
    def settle_seconds(self) -> float:
        return self._settle_seconds

    def observe(self) -> Stream[dict[int, Task]]:
        return self._entries

    def get(self, task_id: int) -> Task | None:
        return self._entries.value.get(task_id)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._entries.value

    def __len__(self) -> int:
        return len(self._entries.value)

    def put(self, task: Task) -> None:
        task_id = task.key
        loop = asyncio.get_running_loop()

        old = self._timers.pop(task_id, None)
        if old is not None:
            old.cancel()
        self._timers[task_id] = loop.call_later(self._settle_seconds, self._expire, task_id)

        self._entries.set({**self._entries.value, task_id: task})

    def evict(self, task_id: int) -> None:
        timer = self._timers.pop(task_id, None)
        if timer is not None:
            timer.cancel()
        if task_id not in self._entries.value:
            return
        entries = dict(self._entries.value)
        del entries[task_id]
        self._entries.set(entries)

    def clear(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._entries.set({})

    def _expire(self, task_id: int) -> None:
        self._timers.pop(task_id, None)
        if task_id in self._entries.value:
            logger.debug("Pending update settled id=%s", task_id)
        self.evict(task_id)
