# src/tasklane/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from enum import StrEnum
from typing import TypeVar


class TaskPriority(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def from_db(cls, raw: str | None) -> TaskPriority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(raw.upper())
        except ValueError:
            return cls.MEDIUM


_PRIORITY_RANK = {TaskPriority.LOW: 0, TaskPriority.MEDIUM: 1, TaskPriority.HIGH: 2}


class TaskFilter(StrEnum):
    ALL = "ALL"
    COMPLETED = "COMPLETED"
    PENDING = "PENDING"


class TaskSortOrder(StrEnum):
    PRIORITY = "PRIORITY"
    DUE_DATE = "DUE_DATE"
    ALPHABETICAL = "ALPHABETICAL"


_ALIASES: dict[str, str] = {
    "due": "DUE_DATE",
    "date": "DUE_DATE",
    "alpha": "ALPHABETICAL",
    "title": "ALPHABETICAL",
    "done": "COMPLETED",
    "open": "PENDING",
    "hi": "HIGH",
    "med": "MEDIUM",
    "lo": "LOW",
}


E = TypeVar("E", bound=StrEnum)


def parse_choice(enum_cls: type[E], raw: str | None, default: E | None = None) -> E | None:
    """
    Case-insensitive enum lookup that also understands short CLI aliases.

    Returns `default` when the value is empty or unknown.
    """
    if raw is None:
        return default
    key = raw.strip()
    if not key:
        return default
    key = _ALIASES.get(key.lower(), key).upper()
    try:
        return enum_cls(key)
    except ValueError:
        return default


# ---- identity ----


@dataclass(frozen=True, slots=True)
class Unsaved:
    """Identity of a task that has not been persisted yet."""

    def __str__(self) -> str:
        return "new"


@dataclass(frozen=True, slots=True)
class Saved:
    value: int

    def __str__(self) -> str:
        return str(self.value)


UNSAVED = Unsaved()

TaskId = Unsaved | Saved


@dataclass(frozen=True, slots=True)
class Task:
    title: str
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: date | None = None
    is_completed: bool = False
    created_date: date = field(default_factory=date.today)
    id: TaskId = UNSAVED

    @property
    def is_saved(self) -> bool:
        return isinstance(self.id, Saved)

    @property
    def key(self) -> int:
        """Integer identity of a persisted task."""
        if isinstance(self.id, Saved):
            return self.id.value
        raise ValueError(f"task {self.title!r} has not been saved yet")

    def with_id(self, task_id: int) -> Task:
        return replace(self, id=Saved(int(task_id)))

    def toggled(self) -> Task:
        return replace(self, is_completed=not self.is_completed)


@dataclass(slots=True)
class OrderEntry:
    """Manual position of one task. `task_id` is the entry's primary key."""

    task_id: int
    position: int
