from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from threading import RLock
from typing import Dict, List, Optional

from .errors import DuplicateKey, NotFound
from .models import TaskEntity
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def sort_key(task: TaskEntity):
    """Ascending due date; ties fall back to creation time, then id."""
    return (task["due_date"], task["created_at"], task["id"])


# PUBLIC_INTERFACE
class TaskStore(ABC):
    """
    Abstract storage contract for tasks, keyed by id.

    Every operation touches a single row and is atomic on its own. Operations
    aimed at a missing id raise NotFound and leave the store unchanged.
    """

    backend_name: str = "abstract"

    @abstractmethod
    def insert(self, task: TaskEntity) -> TaskEntity:
        """Persist a new task. Raise DuplicateKey if its id already exists."""

    @abstractmethod
    def get_all(self) -> List[TaskEntity]:
        """Return all tasks ordered ascending by due date (empty list if none)."""

    @abstractmethod
    def get_by_id(self, task_id: str) -> TaskEntity:
        """Return the task with this id, or raise NotFound."""

    @abstractmethod
    def update(
        self,
        task_id: str,
        *,
        title: str,
        due_date: datetime,
        completed: bool,
        updated_at: datetime,
    ) -> TaskEntity:
        """
        Replace title, due_date, completed and updated_at of one task and return
        the full updated row. Raise NotFound if no row matched.
        """

    @abstractmethod
    def delete(self, task_id: str) -> None:
        """Remove a task permanently. Raise NotFound if no row matched."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored tasks."""


class InMemoryTaskStore(TaskStore):
    """
    Thread-safe in-memory store suitable for testing and default runtime.
    """

    backend_name = "memory"

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, TaskEntity] = {}

    def insert(self, task: TaskEntity) -> TaskEntity:
        with self._lock:
            if task["id"] in self._items:
                raise DuplicateKey()
            self._items[task["id"]] = task.copy()  # type: ignore[assignment]
            return task.copy()  # type: ignore[return-value]

    def get_all(self) -> List[TaskEntity]:
        with self._lock:
            items = sorted(self._items.values(), key=sort_key)
            # Return copies to avoid external mutation
            return [t.copy() for t in items]  # type: ignore[misc]

    def get_by_id(self, task_id: str) -> TaskEntity:
        with self._lock:
            item = self._items.get(task_id)
            if item is None:
                raise NotFound()
            return item.copy()  # type: ignore[return-value]

    def update(
        self,
        task_id: str,
        *,
        title: str,
        due_date: datetime,
        completed: bool,
        updated_at: datetime,
    ) -> TaskEntity:
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                raise NotFound()
            updated = existing.copy()
            updated["title"] = title
            updated["due_date"] = due_date
            updated["completed"] = completed
            updated["updated_at"] = max(updated_at, existing["created_at"])
            self._items[task_id] = updated  # type: ignore[assignment]
            return updated.copy()  # type: ignore[return-value]

    def delete(self, task_id: str) -> None:
        with self._lock:
            if self._items.pop(task_id, None) is None:
                raise NotFound()

    def count(self) -> int:
        with self._lock:
            return len(self._items)


# PUBLIC_INTERFACE
def get_store(settings: Optional[Settings] = None) -> TaskStore:
    """
    Factory to return the configured store based on settings.
    - memory: InMemoryTaskStore
    - sqlite: SQLiteTaskStore at settings.sqlite_db_path
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteTaskStore

        store: TaskStore = SQLiteTaskStore(settings.sqlite_db_path)
    else:
        store = InMemoryTaskStore()
    logger.info("TaskStore ready backend=%s total=%s", store.backend_name, store.count())
    return store
