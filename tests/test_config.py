# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from tasklane.config import Settings
from tasklane.tasks.task_models import TaskFilter, TaskSortOrder

_KEYS = (
    "APP_NAME",
    "LOG_LEVEL",
    "DATA_DIR",
    "TASKS_DB_PATH",
    "SETTLE_MS",
    "DEFAULT_FILTER",
    "DEFAULT_SORT",
    "MANUAL_ORDER",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _KEYS:
        monkeypatch.delenv(f"TASKLANE_{key}", raising=False)


def test_defaults() -> None:
    s = Settings.from_env()

    assert s.app_name == "tasklane"
    assert s.data_dir == Path(".local/tasklane")
    assert s.tasks_db_path == Path(".local/tasklane/tasks.sqlite3")
    assert s.settle_ms == 500
    assert s.settle_seconds == 0.5
    assert s.default_filter is TaskFilter.ALL
    assert s.default_sort is TaskSortOrder.DUE_DATE
    assert s.manual_order is False


def test_values_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKLANE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TASKLANE_SETTLE_MS", "250")
    monkeypatch.setenv("TASKLANE_DEFAULT_FILTER", "done")
    monkeypatch.setenv("TASKLANE_DEFAULT_SORT", "alpha")
    monkeypatch.setenv("TASKLANE_MANUAL_ORDER", "yes")

    s = Settings.from_env()

    assert s.tasks_db_path == tmp_path / "tasks.sqlite3"
    assert s.settle_seconds == 0.25
    assert s.default_filter is TaskFilter.COMPLETED
    assert s.default_sort is TaskSortOrder.ALPHABETICAL
    assert s.manual_order is True


@pytest.mark.parametrize(
    ("key", "raw"),
    [
        ("SETTLE_MS", "soon"),
        ("DEFAULT_FILTER", "someday"),
        ("DEFAULT_SORT", "random"),
    ],
)
def test_invalid_values_fall_back(monkeypatch: pytest.MonkeyPatch, key: str, raw: str) -> None:
    monkeypatch.setenv(f"TASKLANE_{key}", raw)

    s = Settings.from_env()

    assert s.settle_ms == 500
    assert s.default_filter is TaskFilter.ALL
    assert s.default_sort is TaskSortOrder.DUE_DATE


def test_negative_settle_is_clamped(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKLANE_SETTLE_MS", "-20")
    assert Settings.from_env().settle_ms == 0
