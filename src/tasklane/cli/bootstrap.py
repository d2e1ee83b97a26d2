# src/tasklane/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- constructs the stores exactly once and injects them into the service.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..tasks.order_store import TaskOrderStore
from ..tasks.task_api import TaskListService
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    task_store = TaskStore(settings.tasks_db_path)
    order_store = TaskOrderStore(settings.tasks_db_path)
    service = TaskListService(
        task_store,
        order_store,
        settle_seconds=settings.settle_seconds,
        initial_filter=settings.default_filter,
        initial_sort=settings.default_sort,
        manual_order=settings.manual_order,
    )
    logger.debug(
        "Service ready filter=%s sort=%s manual=%s",
        settings.default_filter,
        settings.default_sort,
        settings.manual_order,
    )
    return AppState(
        settings=settings,
        task_store=task_store,
        order_store=order_store,
        service=service,
    )


async def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown: wait for in-flight writes, then detach streams."""
    try:
        await state.service.aclose()
    except Exception:
        logger.exception("Failed to close task service.")
    state.task_store.close()
    state.order_store.close()
