# tests/fakes.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from tasklane.core.streams import StateStream, Stream, map_stream
from tasklane.tasks.task_models import OrderEntry, Task


class FakeTaskRepo:
    """
    In-memory TaskRepo.

    - Keeps insertion order like the SQLite store (ascending id)
    - `fail_updates=True` makes every update raise, to exercise failure paths
    """

    def __init__(self, tasks: Iterable[Task] = (), *, fail_updates: bool = False) -> None:
        self._rows: dict[int, Task] = {}
        self._next_id = 1
        for t in tasks:
            task_id = t.key if t.is_saved else self._allocate()
            self._rows[task_id] = t.with_id(task_id)
            self._next_id = max(self._next_id, task_id + 1)
        self._all: StateStream[list[Task]] = StateStream(self._snapshot(), name="fake.tasks")
        self.fail_updates = fail_updates
        self.updates: list[Task] = []

    def _allocate(self) -> int:
        task_id = self._next_id
        self._next_id += 1
        return task_id

    def _snapshot(self) -> list[Task]:
        return [self._rows[k] for k in sorted(self._rows)]

    def _publish(self) -> None:
        self._all.set(self._snapshot())

    def observe_all(self) -> Stream[list[Task]]:
        return self._all

    def observe_by_completion(self, completed: bool) -> Stream[list[Task]]:
        return map_stream(self._all, lambda tasks: [t for t in tasks if t.is_completed == completed])

    async def get_by_id(self, task_id: int) -> Task | None:
        return self._rows.get(task_id)

    async def insert(self, task: Task) -> int:
        task_id = task.key if task.is_saved else self._allocate()
        self._rows[task_id] = task.with_id(task_id)
        self._next_id = max(self._next_id, task_id + 1)
        self._publish()
        return task_id

    async def update(self, task: Task) -> None:
        self.updates.append(task)
        if self.fail_updates:
            raise RuntimeError("disk full")
        if task.is_saved and task.key in self._rows:
            self._rows[task.key] = task
            self._publish()

    async def delete(self, task: Task) -> None:
        if task.is_saved:
            self._rows.pop(task.key, None)
            self._publish()


class FakeOrderRepo:
    def __init__(self, entries: Iterable[OrderEntry] = ()) -> None:
        self._rows: dict[int, int] = {e.task_id: e.position for e in entries}
        self._order: StateStream[list[OrderEntry]] = StateStream(self._snapshot(), name="fake.order")

    def _snapshot(self) -> list[OrderEntry]:
        items = sorted(self._rows.items(), key=lambda kv: kv[1])
        return [OrderEntry(task_id=k, position=v) for k, v in items]

    def observe_order(self) -> Stream[list[OrderEntry]]:
        return self._order

    async def get_entry(self, task_id: int) -> OrderEntry | None:
        pos = self._rows.get(task_id)
        return None if pos is None else OrderEntry(task_id=task_id, position=pos)

    async def get_max_position(self) -> int | None:
        return max(self._rows.values(), default=None)

    async def insert(self, entry: OrderEntry) -> None:
        await self.insert_all([entry])

    async def insert_all(self, entries: Iterable[OrderEntry]) -> None:
        for e in entries:
            self._rows[e.task_id] = e.position
        self._order.set(self._snapshot())

    async def delete_by_task_id(self, task_id: int) -> None:
        self._rows.pop(task_id, None)
        self._order.set(self._snapshot())

    async def move_task(self, from_position: int, to_position: int) -> None:
        entries = self._snapshot()
        if not (0 <= from_position < len(entries) and 0 <= to_position < len(entries)):
            return
        moved = entries.pop(from_position)
        entries.insert(to_position, moved)
        await self.insert_all([replace(e, position=i) for i, e in enumerate(entries)])
