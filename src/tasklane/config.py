# src/tasklane/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object per process, built once by the composition root.
- No hidden module-level singleton: callers receive settings explicitly.
- Invalid values fall back to defaults instead of failing at startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .tasks.task_models import TaskFilter, TaskSortOrder, parse_choice

ENV_PREFIX = "TASKLANE"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path

    # ---- Task list behaviour ----
    settle_ms: int
    default_filter: TaskFilter
    default_sort: TaskSortOrder
    manual_order: bool

    @property
    def settle_seconds(self) -> float:
        return self.settle_ms / 1000.0

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "tasklane").strip() or "tasklane"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/tasklane"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")

        settle_ms = max(0, _env_int(_k("SETTLE_MS"), 500))
        default_filter = parse_choice(TaskFilter, os.getenv(_k("DEFAULT_FILTER")), TaskFilter.ALL)
        default_sort = parse_choice(TaskSortOrder, os.getenv(_k("DEFAULT_SORT")), TaskSortOrder.DUE_DATE)
        manual_order = _env_bool(_k("MANUAL_ORDER"), False)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            settle_ms=settle_ms,
            default_filter=default_filter or TaskFilter.ALL,
            default_sort=default_sort or TaskSortOrder.DUE_DATE,
            manual_order=manual_order,
        )


def get_settings() -> Settings:
    """Read settings from the current environment (call once, at startup)."""
    return Settings.from_env()
