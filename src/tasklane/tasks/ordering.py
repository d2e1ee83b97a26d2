# src/tasklane/tasks/ordering.py

"""Ordering engine: filter, optimistic overlay and sort (pure functions, no I/O)."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence

from ..core.streams import DerivedStream, Stream, combine
from .task_models import OrderEntry, Task, TaskFilter, TaskSortOrder


def matches_query(task: Task, query: str) -> bool:
    """Case-insensitive substring match on title or description. Blank matches all."""
    needle = query.strip().casefold()
    if not needle:
        return True
    return needle in task.title.casefold() or needle in task.description.casefold()


def apply_filter(tasks: Iterable[Task], task_filter: TaskFilter, query: str = "") -> list[Task]:
    out: list[Task] = []
    for t in tasks:
        if task_filter == TaskFilter.COMPLETED and not t.is_completed:
            continue
        if task_filter == TaskFilter.PENDING and t.is_completed:
            continue
        if not matches_query(t, query):
            continue
        out.append(t)
    return out


def overlay_pending(tasks: Iterable[Task], pending: Mapping[int, Task]) -> list[Task]:
    """Substitute the pending version of every task that has one."""
    if not pending:
        return list(tasks)
    out: list[Task] = []
    for t in tasks:
        cached = pending.get(t.key) if t.is_saved else None
        out.append(cached if cached is not None else t)
    return out


def sort_tasks(tasks: Sequence[Task], sort_order: TaskSortOrder) -> list[Task]:
    """
    Automatic ordering. All branches are stable for equal keys.

    DUE_DATE keeps undated tasks as one block after every dated task,
    in their input order.
    """
    if sort_order == TaskSortOrder.PRIORITY:
        return sorted(tasks, key=lambda t: -t.priority.rank)

    if sort_order == TaskSortOrder.DUE_DATE:
        dated = [t for t in tasks if t.due_date is not None]
        undated = [t for t in tasks if t.due_date is None]
        dated.sort(key=lambda t: t.due_date)  # type: ignore[arg-type, return-value]
        return dated + undated

    if sort_order == TaskSortOrder.ALPHABETICAL:
        return sorted(tasks, key=lambda t: t.title.casefold())

    return list(tasks)


def order_manually(tasks: Sequence[Task], entries: Iterable[OrderEntry]) -> list[Task]:
    """Ascending position; tasks without an entry go last, in input order."""
    positions = {e.task_id: e.position for e in entries}

    def position_of(task: Task) -> float:
        if not task.is_saved:
            return math.inf
        pos = positions.get(task.key)
        return math.inf if pos is None else pos

    return sorted(tasks, key=position_of)


def build_view(
    filtered: Sequence[Task],
    entries: Sequence[OrderEntry],
    *,
    sort_order: TaskSortOrder,
    manual: bool,
    pending: Mapping[int, Task],
) -> list[Task]:
    """
    Combine one snapshot of every input into the list the UI shows.

    The overlay runs before sorting, so a pending edit is ordered by its new
    values. In manual mode the sort key is ignored.
    """
    overlaid = overlay_pending(filtered, pending)
    if manual:
        return order_manually(overlaid, entries)
    return sort_tasks(overlaid, sort_order)


class OrderingEngine:
    """
    Live view over the stores and the current selection.

    `filtered` narrows the entity snapshot by status filter and search query;
    `tasks` is the final ordered list, recomputed on every upstream change.
    """

    def __init__(
        self,
        *,
        all_tasks: Stream[list[Task]],
        order: Stream[list[OrderEntry]],
        task_filter: Stream[TaskFilter],
        search_query: Stream[str],
        sort_order: Stream[TaskSortOrder],
        manual: Stream[bool],
        pending: Stream[dict[int, Task]],
    ) -> None:
        self.filtered: DerivedStream[list[Task]] = combine(
            [all_tasks, task_filter, search_query],
            apply_filter,
            name="view.filtered",
        )
        self.tasks: DerivedStream[list[Task]] = combine(
            [self.filtered, order, sort_order, manual, pending],
            lambda filtered, entries, key, is_manual, cached: build_view(
                filtered,
                entries,
                sort_order=key,
                manual=is_manual,
                pending=cached,
            ),
            name="view.tasks",
        )

    def close(self) -> None:
        self.tasks.close()
        self.filtered.close()
