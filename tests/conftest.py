# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from tasklane.core.state import AppState
from tasklane.tasks.order_store import TaskOrderStore
from tasklane.tasks.task_api import TaskListService
from tasklane.tasks.task_models import TaskFilter, TaskSortOrder
from tasklane.tasks.task_store import TaskStore

SETTLE_SECONDS = 0.05


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than reading the environment,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="tasklane-test",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        settle_seconds=SETTLE_SECONDS,
        default_filter=TaskFilter.ALL,
        default_sort=TaskSortOrder.DUE_DATE,
        manual_order=False,
    )


@pytest.fixture()
def task_store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.tasks_db_path)


@pytest.fixture()
def order_store(settings: SimpleNamespace) -> TaskOrderStore:
    return TaskOrderStore(settings.tasks_db_path)


@pytest.fixture()
def service(task_store: TaskStore, order_store: TaskOrderStore) -> TaskListService:
    """
    Service wired to real SQLite stores: their interplay with the ordering
    engine is part of what we want to test.
    """
    return TaskListService(task_store, order_store, settle_seconds=SETTLE_SECONDS)


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    task_store: TaskStore,
    order_store: TaskOrderStore,
    service: TaskListService,
) -> AppState:
    return AppState(
        settings=settings,
        task_store=task_store,
        order_store=order_store,
        service=service,
    )
