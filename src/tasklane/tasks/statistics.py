# src/tasklane/tasks/statistics.py

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date

from ..core.streams import DerivedStream, Stream, combine
from .task_models import Task


@dataclass(frozen=True, slots=True)
class TaskStatistics:
    total_tasks: int = 0
    completed_tasks: int = 0
    has_due_dates: bool = False
    has_overdue: bool = False

    @property
    def pending_tasks(self) -> int:
        return self.total_tasks - self.completed_tasks

    @property
    def completion_percentage(self) -> float:
        """Completed share as a fraction in [0, 1]; 0 for an empty list."""
        if self.total_tasks <= 0:
            return 0.0
        return self.completed_tasks / self.total_tasks


def compute_statistics(
    all_tasks: Sequence[Task],
    completed_tasks: Sequence[Task],
    *,
    today: date,
) -> TaskStatistics:
    return TaskStatistics(
        total_tasks=len(all_tasks),
        completed_tasks=len(completed_tasks),
        has_due_dates=any(t.due_date is not None for t in all_tasks),
        has_overdue=any(
            not t.is_completed and t.due_date is not None and t.due_date < today for t in all_tasks
        ),
    )


class StatisticsAggregator:
    """Counts derived from the full and the completed entity streams."""

    def __init__(
        self,
        all_tasks: Stream[list[Task]],
        completed_tasks: Stream[list[Task]],
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._today = today
        self.stats: DerivedStream[TaskStatistics] = combine(
            [all_tasks, completed_tasks],
            lambda everything, done: compute_statistics(everything, done, today=self._today()),
            name="stats",
        )

    def close(self) -> None:
        self.stats.close()
