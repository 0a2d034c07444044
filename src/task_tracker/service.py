from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from .errors import NotFound, ValidationError, describe_errors
from .models import TaskEntity
from .ports import Clock, IdGenerator, SystemClock, UuidGenerator
from .repositories import TaskStore
from .schemas import TaskRequest

logger = logging.getLogger(__name__)

TaskInput = Union[TaskRequest, Mapping[str, Any]]


# PUBLIC_INTERFACE
class TaskService:
    """
    Stateless task lifecycle handler.

    Every call validates its input, derives identity and timestamps, and then
    performs exactly one store operation. The service is the only place ids
    and timestamps are generated; anything a caller sends for them is ignored.
    """

    def __init__(
        self,
        store: TaskStore,
        clock: Optional[Clock] = None,
        id_generator: Optional[IdGenerator] = None,
    ) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self._ids = id_generator or UuidGenerator()

    @staticmethod
    def _validate(request: TaskInput) -> TaskRequest:
        if isinstance(request, TaskRequest):
            return request
        try:
            return TaskRequest.model_validate(request)
        except PydanticValidationError as e:
            raise ValidationError(describe_errors(e.errors())) from e

    def list_tasks(self) -> List[TaskEntity]:
        return self._store.get_all()

    def create_task(self, request: TaskInput) -> TaskEntity:
        """
        Validate and persist a new task.

        Raises:
            ValidationError: bad input; nothing is written.
            StoreError: the store failed to persist the task.
        """
        data = self._validate(request)
        now = self._clock.now()
        task: TaskEntity = {
            "id": self._ids.new_id(),
            "title": data.title,
            "due_date": data.due_date,
            "completed": data.completed,
            "created_at": now,
            "updated_at": now,
        }
        created = self._store.insert(task)
        logger.info("Created task id=%s due=%s", created["id"], created["due_date"].isoformat())
        return created

    def get_task(self, task_id: str) -> TaskEntity:
        try:
            return self._store.get_by_id(task_id)
        except NotFound:
            logger.warning("Task not found id=%s", task_id)
            raise

    def update_task(self, task_id: str, request: TaskInput) -> TaskEntity:
        """
        Replace title, due date and completion flag of an existing task.

        Raises:
            ValidationError: bad input; nothing is written.
            NotFound: no task with this id; nothing is written.
            StoreError: the store failed to persist the change.
        """
        data = self._validate(request)
        try:
            updated = self._store.update(
                task_id,
                title=data.title,
                due_date=data.due_date,
                completed=data.completed,
                updated_at=self._clock.now(),
            )
        except NotFound:
            logger.warning("Update of missing task id=%s", task_id)
            raise
        logger.info("Updated task id=%s completed=%s", task_id, updated["completed"])
        return updated

    def delete_task(self, task_id: str) -> Dict[str, str]:
        try:
            self._store.delete(task_id)
        except NotFound:
            logger.warning("Delete of missing task id=%s", task_id)
            raise
        logger.info("Deleted task id=%s", task_id)
        return {"message": "Task deleted successfully"}
