from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Generator, List

from .errors import DuplicateKey, NotFound, StoreError
from .models import TaskEntity
from .repositories import TaskStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "tasks"
    id: str = "id"
    title: str = "title"
    due_date: str = "due_date"
    completed: str = "completed"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_COLS = _Cols()


def _to_db(value: datetime) -> str:
    # Fixed-width UTC text so that ORDER BY on the column is chronological.
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _from_db(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class SQLiteTaskStore(TaskStore):
    """
    SQLite store implementing the TaskStore contract.

    Each operation opens its own connection and runs as one transaction, so a
    failed statement never leaves a partial write behind.
    """

    backend_name = "sqlite"

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self, action: str) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path, timeout=30.0)
        except sqlite3.Error as e:
            logger.error("Cannot open task db=%s: %s", self._db_path, e)
            raise StoreError(f"Failed to {action}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            logger.error("Integrity error trying to %s: %s", action, e)
            if "UNIQUE" in str(e):
                raise DuplicateKey() from e
            raise StoreError(f"Failed to {action}") from e
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("Error trying to %s: %s", action, e)
            raise StoreError(f"Failed to {action}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn("initialize task storage") as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} TEXT PRIMARY KEY,
                    {_COLS.title} TEXT NOT NULL,
                    {_COLS.due_date} TEXT NOT NULL,
                    {_COLS.completed} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.created_at} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_due_date ON {_COLS.table}({_COLS.due_date})"
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_completed ON {_COLS.table}({_COLS.completed})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TaskEntity:
        return {
            "id": str(row[_COLS.id]),
            "title": str(row[_COLS.title]),
            "due_date": _from_db(row[_COLS.due_date]),
            "completed": bool(row[_COLS.completed]),
            "created_at": _from_db(row[_COLS.created_at]),
            "updated_at": _from_db(row[_COLS.updated_at]),
        }

    @staticmethod
    def _select_one(conn: sqlite3.Connection, task_id: str):
        return conn.execute(
            f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,)
        ).fetchone()

    def insert(self, task: TaskEntity) -> TaskEntity:
        with self._conn("create task") as conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.id}, {_COLS.title}, {_COLS.due_date},
                    {_COLS.completed}, {_COLS.created_at}, {_COLS.updated_at})
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    task["id"],
                    task["title"],
                    _to_db(task["due_date"]),
                    1 if task["completed"] else 0,
                    _to_db(task["created_at"]),
                    _to_db(task["updated_at"]),
                ),
            )
            row = self._select_one(conn, task["id"])
            assert row is not None
            return self._row_to_entity(row)

    def get_all(self) -> List[TaskEntity]:
        with self._conn("retrieve tasks") as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM {_COLS.table}
                ORDER BY {_COLS.due_date} ASC, {_COLS.created_at} ASC, {_COLS.id} ASC
                """
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]

    def get_by_id(self, task_id: str) -> TaskEntity:
        with self._conn("retrieve task") as conn:
            row = self._select_one(conn, task_id)
            if row is None:
                raise NotFound()
            return self._row_to_entity(row)

    def update(
        self,
        task_id: str,
        *,
        title: str,
        due_date: datetime,
        completed: bool,
        updated_at: datetime,
    ) -> TaskEntity:
        with self._conn("update task") as conn:
            cur = conn.execute(
                f"""
                UPDATE {_COLS.table}
                SET {_COLS.title} = ?, {_COLS.due_date} = ?, {_COLS.completed} = ?,
                    {_COLS.updated_at} = MAX({_COLS.created_at}, ?)
                WHERE {_COLS.id} = ?
                """,
                (title, _to_db(due_date), 1 if completed else 0, _to_db(updated_at), task_id),
            )
            if cur.rowcount == 0:
                raise NotFound()
            row = self._select_one(conn, task_id)
            assert row is not None
            return self._row_to_entity(row)

    def delete(self, task_id: str) -> None:
        with self._conn("delete task") as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,))
            if cur.rowcount == 0:
                raise NotFound()

    def count(self) -> int:
        with self._conn("count tasks") as conn:
            row = conn.execute(f"SELECT COUNT(*) AS cnt FROM {_COLS.table}").fetchone()
            return int(row["cnt"]) if row else 0
