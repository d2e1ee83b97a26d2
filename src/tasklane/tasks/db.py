# src/tasklane/tasks/db.py

from __future__ import annotations

import contextlib
import sqlite3
from pathlib import Path


def open_connection(db_path: Path) -> sqlite3.Connection:
    """
    Short-lived connection with Row access.

    Stores open one connection per call, so they are safe to use from
    `asyncio.to_thread` workers.
    """
    conn = sqlite3.connect(str(db_path), timeout=30.0)
    conn.row_factory = sqlite3.Row
    with contextlib.suppress(sqlite3.DatabaseError):
        conn.execute("PRAGMA journal_mode=WAL")
    return conn


def table_columns(cur: sqlite3.Cursor, table: str) -> set[str]:
    cur.execute(f"PRAGMA table_info({table})")
    return {row["name"] for row in cur.fetchall()}
