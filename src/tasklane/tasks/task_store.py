# src/tasklane/tasks/task_store.py

from __future__ import annotations

import asyncio
import logging
import sqlite3
from datetime import date
from pathlib import Path

from ..core.streams import DerivedStream, StateStream, Stream, map_stream
from .db import open_connection, table_columns
from .task_models import Task, TaskPriority

logger = logging.getLogger(__name__)


def _date_to_str(d: date | None) -> str | None:
    return d.isoformat() if d is not None else None


def _str_to_date(raw: str | None) -> date | None:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        logger.warning("Unparseable date in tasks table: %r", raw)
        return None


class TaskStore:
    """
    SQLite entity store.

    Reads are streams: `observe_all()` holds the full snapshot (ascending id) and
    re-emits it after every write made through this store. Writes run the blocking
    SQLite work in a worker thread and publish the fresh snapshot back on the
    caller's event loop.

    Thread-safety:
    - each method opens its own SQLite connection
    - streams must only be touched from the event-loop thread
    - writes are serialized per store instance (one asyncio.Lock)
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        self._all: StateStream[list[Task]] = StateStream(self._load_all(), name="tasks.all")
        self._by_completion: dict[bool, DerivedStream[list[Task]]] = {}
        # Writes and their publishes are serialized in call order.
        self._write_lock = asyncio.Lock()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, len(self._all.value))

    def close(self) -> None:
        for stream in self._by_completion.values():
            stream.close()
        self._by_completion.clear()

    # ---- low-level helpers ----

    def _ensure_schema(self) -> None:
        conn = open_connection(self._db_path)
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    priority TEXT NOT NULL DEFAULT 'MEDIUM',
                    due_date TEXT,
                    is_completed INTEGER NOT NULL DEFAULT 0,
                    created_date TEXT NOT NULL
                )
                """
            )

            cols = table_columns(cur, "tasks")

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("description", "TEXT NOT NULL DEFAULT ''")
            add_col("priority", "TEXT NOT NULL DEFAULT 'MEDIUM'")
            add_col("due_date", "TEXT")
            add_col("is_completed", "INTEGER NOT NULL DEFAULT 0")
            add_col("created_date", "TEXT NOT NULL DEFAULT ''")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_completed ON tasks(is_completed)")
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            title=str(row["title"] or ""),
            description=str(row["description"] or ""),
            priority=TaskPriority.from_db(row["priority"]),
            due_date=_str_to_date(row["due_date"]),
            is_completed=bool(row["is_completed"]),
            created_date=_str_to_date(row["created_date"]) or date.today(),
        ).with_id(int(row["id"]))

    @staticmethod
    def _task_params(task: Task) -> tuple[object, ...]:
        return (
            task.title,
            task.description,
            task.priority.value,
            _date_to_str(task.due_date),
            1 if task.is_completed else 0,
            _date_to_str(task.created_date),
        )

    @classmethod
    def _select_all(cls, conn: sqlite3.Connection) -> list[Task]:
        cur = conn.execute("SELECT * FROM tasks ORDER BY id ASC")
        return [cls._row_to_task(r) for r in cur.fetchall()]

    def _load_all(self) -> list[Task]:
        conn = open_connection(self._db_path)
        try:
            return self._select_all(conn)
        finally:
            conn.close()

    def _publish(self, snapshot: list[Task]) -> None:
        self._all.set(snapshot)

    # ---- blocking bodies (run in worker threads) ----

    def _insert_sync(self, task: Task) -> tuple[int, list[Task]]:
        conn = open_connection(self._db_path)
        try:
            cur = conn.cursor()
            if task.is_saved:
                # Replace-on-conflict: a saved task keeps its identity.
                cur.execute(
                    """
                    INSERT OR REPLACE INTO tasks(
                        id, title, description, priority, due_date, is_completed, created_date
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (task.key, *self._task_params(task)),
                )
                task_id = task.key
            else:
                cur.execute(
                    """
                    INSERT INTO tasks(
                        title, description, priority, due_date, is_completed, created_date
                    )
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    self._task_params(task),
                )
                rowid = cur.lastrowid
                if rowid is None:
                    raise RuntimeError("SQLite did not return lastrowid for tasks insert")
                task_id = int(rowid)
            conn.commit()
            return task_id, self._select_all(conn)
        finally:
            conn.close()

    def _update_sync(self, task: Task) -> tuple[int, list[Task]]:
        conn = open_connection(self._db_path)
        try:
            cur = conn.execute(
                """
                UPDATE tasks
                SET title = ?, description = ?, priority = ?, due_date = ?,
                    is_completed = ?, created_date = ?
                WHERE id = ?
                """,
                (*self._task_params(task), task.key),
            )
            conn.commit()
            return cur.rowcount, self._select_all(conn)
        finally:
            conn.close()

    def _delete_sync(self, task_id: int) -> list[Task]:
        conn = open_connection(self._db_path)
        try:
            conn.execute("DELETE FROM tasks WHERE id = ?", (int(task_id),))
            conn.commit()
            return self._select_all(conn)
        finally:
            conn.close()

    def _get_sync(self, task_id: int) -> Task | None:
        conn = open_connection(self._db_path)
        try:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),)).fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    # ---- public API ----

    def observe_all(self) -> Stream[list[Task]]:
        return self._all

    def observe_by_completion(self, completed: bool) -> Stream[list[Task]]:
        flag = bool(completed)
        stream = self._by_completion.get(flag)
        if stream is None:
            stream = map_stream(
                self._all,
                lambda tasks: [t for t in tasks if t.is_completed == flag],
                name=f"tasks.completed={flag}",
            )
            self._by_completion[flag] = stream
        return stream

    def count_tasks(self) -> int:
        return len(self._all.value)

    async def get_by_id(self, task_id: int) -> Task | None:
        return await asyncio.to_thread(self._get_sync, task_id)

    async def insert(self, task: Task) -> int:
        async with self._write_lock:
            task_id, snapshot = await asyncio.to_thread(self._insert_sync, task)
            self._publish(snapshot)
        logger.debug("Task inserted id=%s title=%r", task_id, task.title)
        return task_id

    async def update(self, task: Task) -> None:
        if not task.is_saved:
            logger.warning("Ignoring update of unsaved task %r", task.title)
            return
        async with self._write_lock:
            changed, snapshot = await asyncio.to_thread(self._update_sync, task)
            self._publish(snapshot)
        if not changed:
            logger.warning("Update matched no row id=%s", task.key)

    async def delete(self, task: Task) -> None:
        if not task.is_saved:
            return
        async with self._write_lock:
            snapshot = await asyncio.to_thread(self._delete_sync, task.key)
            self._publish(snapshot)
        logger.debug("Task deleted id=%s", task.key)
