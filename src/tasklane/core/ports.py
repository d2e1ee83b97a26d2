# src/tasklane/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The ordering engine and the command surface depend on these Protocols instead of
the SQLite stores, so tests can drive them with in-memory fakes.
"""

from collections.abc import Iterable
from typing import Protocol

from ..tasks.task_models import OrderEntry, Task
from .streams import Stream


class TaskRepo(Protocol):
    """Entity store: one record per task."""

    def observe_all(self) -> Stream[list[Task]]: ...
    def observe_by_completion(self, completed: bool) -> Stream[list[Task]]: ...

    async def get_by_id(self, task_id: int) -> Task | None: ...
    async def insert(self, task: Task) -> int: ...
    async def update(self, task: Task) -> None: ...
    async def delete(self, task: Task) -> None: ...


class OrderRepo(Protocol):
    """Manual order: task id -> integer position."""

    def observe_order(self) -> Stream[list[OrderEntry]]: ...

    async def get_entry(self, task_id: int) -> OrderEntry | None: ...
    async def get_max_position(self) -> int | None: ...
    async def insert(self, entry: OrderEntry) -> None: ...
    async def insert_all(self, entries: Iterable[OrderEntry]) -> None: ...
    async def delete_by_task_id(self, task_id: int) -> None: ...
    async def move_task(self, from_position: int, to_position: int) -> None: ...
