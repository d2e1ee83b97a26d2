# src/tasklane/tasks/task_api.py

"""
Task list facade used by front ends.

Exposes the ordered view, the statistics and the current selection as streams,
plus the commands that mutate state. Commands are fire-and-forget: each one
schedules its store writes on the running loop and returns the asyncio.Task,
which callers may await when they need the outcome.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from datetime import date
from typing import Any, TypeVar

from ..core.ports import OrderRepo, TaskRepo
from ..core.streams import StateStream, Stream
from .ordering import OrderingEngine
from .pending import PendingUpdates
from .statistics import StatisticsAggregator, TaskStatistics
from .task_models import OrderEntry, Task, TaskFilter, TaskSortOrder

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TaskListService:
    def __init__(
        self,
        task_store: TaskRepo,
        order_store: OrderRepo,
        *,
        settle_seconds: float = 0.5,
        initial_filter: TaskFilter = TaskFilter.ALL,
        initial_sort: TaskSortOrder = TaskSortOrder.DUE_DATE,
        manual_order: bool = False,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._task_store = task_store
        self._order_store = order_store
        self._pending = PendingUpdates(settle_seconds=settle_seconds)
        self._inflight: set[asyncio.Task[Any]] = set()
        self._append_lock = asyncio.Lock()

        self._filter: StateStream[TaskFilter] = StateStream(initial_filter, name="filter")
        self._sort_order: StateStream[TaskSortOrder] = StateStream(initial_sort, name="sort_order")
        self._manual: StateStream[bool] = StateStream(bool(manual_order), name="manual_order")
        self._query: StateStream[str] = StateStream("", name="search_query")

        self._engine = OrderingEngine(
            all_tasks=task_store.observe_all(),
            order=order_store.observe_order(),
            task_filter=self._filter,
            search_query=self._query,
            sort_order=self._sort_order,
            manual=self._manual,
            pending=self._pending.observe(),
        )
        self._stats = StatisticsAggregator(
            task_store.observe_all(),
            task_store.observe_by_completion(True),
            today=today,
        )

    # ---- observed state ----

    @property
    def tasks(self) -> Stream[list[Task]]:
        return self._engine.tasks

    @property
    def task_stats(self) -> Stream[TaskStatistics]:
        return self._stats.stats

    @property
    def filter(self) -> Stream[TaskFilter]:
        return self._filter

    @property
    def sort_order(self) -> Stream[TaskSortOrder]:
        return self._sort_order

    @property
    def is_manual_order(self) -> Stream[bool]:
        return self._manual

    @property
    def search_query(self) -> Stream[str]:
        return self._query

    @property
    def pending(self) -> PendingUpdates:
        return self._pending

    # ---- setters ----

    def set_filter(self, task_filter: TaskFilter) -> None:
        self._filter.set(task_filter)

    def set_sort_order(self, sort_order: TaskSortOrder) -> None:
        self._sort_order.set(sort_order)

    def set_manual_order(self, enabled: bool) -> None:
        self._manual.set(bool(enabled))

    def toggle_manual_ordering(self) -> None:
        self._manual.set(not self._manual.value)

    def set_search_query(self, query: str) -> None:
        self._query.set(query or "")

    # ---- commands ----

    def toggle_task_completion(self, task: Task) -> asyncio.Task[None]:
        flipped = task.toggled()
        self._pending.put(flipped)
        return self._launch(self._persist_pending(flipped), f"toggle id={task.key}")

    def delete_task(self, task: Task) -> asyncio.Task[None]:
        self._pending.evict(task.key)
        return self._launch(self._delete(task), f"delete id={task.key}")

    def restore_task(self, task: Task) -> asyncio.Task[int]:
        """Re-insert a deleted task under its original id, at the end of the manual order."""
        return self._launch(self._insert(task), f"restore id={task.id}")

    def insert_task(self, task: Task) -> asyncio.Task[int]:
        return self._launch(self._insert(task), f"insert title={task.title!r}")

    def update_task(self, task: Task) -> asyncio.Task[None]:
        if not task.is_saved:
            return self._launch(self._task_store.update(task), f"update id={task.id}")
        # Replaces any pending toggle of the same task.
        self._pending.put(task)
        return self._launch(self._persist_pending(task), f"update id={task.id}")

    def move_task(self, from_position: int, to_position: int) -> asyncio.Task[None]:
        return self._launch(
            self._order_store.move_task(from_position, to_position),
            f"move {from_position}->{to_position}",
        )

    async def get_task(self, task_id: int) -> Task | None:
        return await self._task_store.get_by_id(task_id)

    def order_index(self, task: Task) -> int | None:
        """Index of `task` in the full manual order, as counted by `move_task`."""
        if not task.is_saved:
            return None
        for index, entry in enumerate(self._order_store.observe_order().value):
            if entry.task_id == task.key:
                return index
        return None

    # ---- lifecycle ----

    async def drain(self) -> None:
        """Wait for every write issued so far (failures are already logged)."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def aclose(self) -> None:
        await self.drain()
        self._pending.clear()
        self._engine.close()
        self._stats.close()

    # ---- internals ----

    async def _persist_pending(self, task: Task) -> None:
        try:
            await self._task_store.update(task)
        except Exception:
            # Leave the entry alone if a newer put replaced it.
            if self._pending.get(task.key) == task:
                self._pending.evict(task.key)
            raise

    async def _delete(self, task: Task) -> None:
        await self._task_store.delete(task)
        await self._order_store.delete_by_task_id(task.key)

    async def _insert(self, task: Task) -> int:
        task_id = await self._task_store.insert(task)
        async with self._append_lock:
            max_position = await self._order_store.get_max_position()
            position = 0 if max_position is None else max_position + 1
            await self._order_store.insert(OrderEntry(task_id=task_id, position=position))
        logger.info("Task %s stored at manual position %s", task_id, position)
        return task_id

    def _launch(self, coro: Coroutine[Any, Any, T], what: str) -> asyncio.Task[T]:
        task = asyncio.get_running_loop().create_task(coro)
        self._inflight.add(task)

        def _done(t: asyncio.Task[Any]) -> None:
            self._inflight.discard(t)
            if t.cancelled():
                logger.debug("Command cancelled: %s", what)
                return
            exc = t.exception()
            if exc is not None:
                logger.error("Command failed: %s", what, exc_info=exc)

        task.add_done_callback(_done)
        return task
