# src/tasklane/tasks/task_editor.py

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import date
from typing import Any

from .task_api import TaskListService
from .task_models import Task, TaskPriority

logger = logging.getLogger(__name__)


class TaskEditor:
    """
    Edit-or-create form state for a single task.

    A fresh editor describes a new task. `load()` switches it to editing an
    existing one; an unknown id leaves it in the new-task state.
    """

    def __init__(self, service: TaskListService) -> None:
        self._service = service
        self.task: Task | None = None
        self.title = ""
        self.description = ""
        self.priority = TaskPriority.MEDIUM
        self.due_date: date | None = None
        self.is_completed = False
        self.last_write: asyncio.Task[Any] | None = None

    @property
    def is_new(self) -> bool:
        return self.task is None

    async def load(self, task_id: int) -> bool:
        loaded = await self._service.get_task(task_id)
        if loaded is None:
            logger.info("Task %s not found; editing a new task", task_id)
            return False
        self.task = loaded
        self.title = loaded.title
        self.description = loaded.description
        self.priority = loaded.priority
        self.due_date = loaded.due_date
        self.is_completed = loaded.is_completed
        return True

    def toggle_completion(self) -> None:
        self.is_completed = not self.is_completed

    def save(self) -> bool:
        """
        Persist the draft. A blank title is rejected with False and nothing is
        written; otherwise the write is scheduled (see `last_write`) and True
        is returned.
        """
        if not self.title.strip():
            return False

        if self.task is not None:
            updated = replace(
                self.task,
                title=self.title,
                description=self.description,
                priority=self.priority,
                due_date=self.due_date,
                is_completed=self.is_completed,
            )
            self.last_write = self._service.update_task(updated)
        else:
            draft = Task(
                title=self.title,
                description=self.description,
                priority=self.priority,
                due_date=self.due_date,
                is_completed=self.is_completed,
            )
            self.last_write = self._service.insert_task(draft)
        return True

    def delete(self) -> bool:
        if self.task is None:
            return False
        self.last_write = self._service.delete_task(self.task)
        return True
