# src/tasklane/tasks/order_store.py

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import Iterable
from pathlib import Path

from ..core.streams import StateStream, Stream
from .db import open_connection, table_columns
from .task_models import OrderEntry

logger = logging.getLogger(__name__)


class TaskOrderStore:
    """
    SQLite manual-order store: one row per task id with an integer position.

    Positions need not be contiguous; `move_task` repacks them to 0..n-1.
    The snapshot stream is sorted by position, ties broken by row order.
    Writes are serialized per instance, publishes follow write order.
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        self._order: StateStream[list[OrderEntry]] = StateStream(self._load_order(), name="task_order")
        self._write_lock = asyncio.Lock()
        logger.info("TaskOrderStore ready db=%s entries=%s", self._db_path, len(self._order.value))

    def close(self) -> None:
        return

    # ---- low-level helpers ----

    def _ensure_schema(self) -> None:
        conn = open_connection(self._db_path)
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS task_order (
                    task_id INTEGER PRIMARY KEY,
                    position INTEGER NOT NULL
                )
                """
            )
            if "position" not in table_columns(cur, "task_order"):
                cur.execute("ALTER TABLE task_order ADD COLUMN position INTEGER NOT NULL DEFAULT 0")
                logger.info("TaskOrderStore migration: added column position")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_task_order_position ON task_order(position)")
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _select_order(conn: sqlite3.Connection) -> list[OrderEntry]:
        cur = conn.execute("SELECT task_id, position FROM task_order ORDER BY position ASC, rowid ASC")
        return [OrderEntry(task_id=int(r["task_id"]), position=int(r["position"])) for r in cur.fetchall()]

    def _load_order(self) -> list[OrderEntry]:
        conn = open_connection(self._db_path)
        try:
            return self._select_order(conn)
        finally:
            conn.close()

    @staticmethod
    def _replace_all(conn: sqlite3.Connection, entries: Iterable[OrderEntry]) -> None:
        conn.executemany(
            "INSERT OR REPLACE INTO task_order(task_id, position) VALUES (?, ?)",
            [(int(e.task_id), int(e.position)) for e in entries],
        )

    # ---- blocking bodies (run in worker threads) ----

    def _write_sync(self, entries: list[OrderEntry]) -> list[OrderEntry]:
        conn = open_connection(self._db_path)
        try:
            self._replace_all(conn, entries)
            conn.commit()
            return self._select_order(conn)
        finally:
            conn.close()

    def _delete_sync(self, task_id: int) -> list[OrderEntry]:
        conn = open_connection(self._db_path)
        try:
            conn.execute("DELETE FROM task_order WHERE task_id = ?", (int(task_id),))
            conn.commit()
            return self._select_order(conn)
        finally:
            conn.close()

    def _get_sync(self, task_id: int) -> OrderEntry | None:
        conn = open_connection(self._db_path)
        try:
            row = conn.execute(
                "SELECT task_id, position FROM task_order WHERE task_id = ?", (int(task_id),)
            ).fetchone()
            if row is None:
                return None
            return OrderEntry(task_id=int(row["task_id"]), position=int(row["position"]))
        finally:
            conn.close()

    def _max_position_sync(self) -> int | None:
        conn = open_connection(self._db_path)
        try:
            (value,) = conn.execute("SELECT MAX(position) FROM task_order").fetchone()
            return None if value is None else int(value)
        finally:
            conn.close()

    def _move_sync(self, from_position: int, to_position: int) -> list[OrderEntry] | None:
        conn = open_connection(self._db_path)
        try:
            conn.execute("BEGIN IMMEDIATE")
            entries = self._select_order(conn)
            n = len(entries)
            if not (0 <= from_position < n and 0 <= to_position < n):
                conn.rollback()
                return None

            moved = entries.pop(from_position)
            entries.insert(to_position, moved)
            for index, entry in enumerate(entries):
                entry.position = index

            self._replace_all(conn, entries)
            conn.commit()
            return self._select_order(conn)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # ---- public API ----

    def observe_order(self) -> Stream[list[OrderEntry]]:
        return self._order

    async def get_entry(self, task_id: int) -> OrderEntry | None:
        return await asyncio.to_thread(self._get_sync, task_id)

    async def get_max_position(self) -> int | None:
        return await asyncio.to_thread(self._max_position_sync)

    async def insert(self, entry: OrderEntry) -> None:
        await self.insert_all([entry])

    async def insert_all(self, entries: Iterable[OrderEntry]) -> None:
        batch = list(entries)
        if not batch:
            return
        async with self._write_lock:
            snapshot = await asyncio.to_thread(self._write_sync, batch)
            self._order.set(snapshot)

    async def delete_by_task_id(self, task_id: int) -> None:
        async with self._write_lock:
            snapshot = await asyncio.to_thread(self._delete_sync, task_id)
            self._order.set(snapshot)

    async def move_task(self, from_position: int, to_position: int) -> None:
        """
        Move the entry at index `from_position` to index `to_position`.

        Indices refer to the list sorted by position. Out-of-range indices are a
        no-op. After the splice every entry is renumbered to its index and the
        whole list is written in one transaction.
        """
        async with self._write_lock:
            snapshot = await asyncio.to_thread(self._move_sync, int(from_position), int(to_position))
            if snapshot is not None:
                self._order.set(snapshot)
        if snapshot is None:
            logger.debug("move_task(%s, %s) out of range; ignored", from_position, to_position)
            return
        logger.debug("Task order moved %s -> %s", from_position, to_position)
