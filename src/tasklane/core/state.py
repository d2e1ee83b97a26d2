# src/tasklane/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.order_store import TaskOrderStore
from ..tasks.task_api import TaskListService
from ..tasks.task_models import Task
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings object (config.Settings in production, SimpleNamespace in tests).
    settings: Any

    task_store: TaskStore
    order_store: TaskOrderStore
    service: TaskListService

    # Last task removed from the console, kept for a single-step /undo.
    last_deleted: Task | None = None