"""
Client side of the task API.

TaskApi wraps the REST endpoints over an httpx.Client. TaskBoard holds the
list a UI renders and reconciles it with the server: the local list changes
only after the server confirms a mutation, and always takes the server's
representation of the task, never a local guess.
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, Generator, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from .lifecycle import DueDateInput, is_overdue, normalize_title, parse_date_input
from .schemas import TaskOut, TaskRequest
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class ApiError(Exception):
    """
    Any failed call: non-2xx response, unreachable server, or unreadable body.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


# PUBLIC_INTERFACE
class TaskApi:
    """
    Thin wrapper over the task endpoints.

    Any httpx.Client works, including FastAPI's TestClient. base_path is
    prepended to every endpoint path.
    """

    def __init__(self, http: httpx.Client, base_path: str = "/api/v1") -> None:
        self._http = http
        self._base = base_path.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, timeout: float = 10.0) -> "TaskApi":
        """Build a client for API_BASE_URL with a bounded request timeout."""
        settings = settings or get_settings()
        return cls(httpx.Client(base_url=settings.api_base_url, timeout=timeout), base_path="")

    def close(self) -> None:
        self._http.close()

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self._base}{path}"
        try:
            response = self._http.request(method, url, json=json)
        except httpx.HTTPError as e:
            logger.error("Error calling %s %s: %s", method, url, e)
            raise ApiError("Cannot reach the task service") from e

        if response.is_error:
            try:
                message = response.json().get("message")
            except (ValueError, AttributeError):
                message = None
            logger.error("%s %s returned %s: %s", method, url, response.status_code, message)
            raise ApiError(message or f"API error: {response.status_code}", response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ApiError("Unreadable response from the task service", response.status_code) from e

    @staticmethod
    def _parse_task(data: Any) -> TaskOut:
        try:
            return TaskOut.model_validate(data)
        except PydanticValidationError as e:
            raise ApiError("Unreadable task in response") from e

    @staticmethod
    def _body(request: TaskRequest) -> Dict[str, Any]:
        return request.model_dump(mode="json", by_alias=True)

    def get_tasks(self) -> List[TaskOut]:
        data = self._request("GET", "/tasks")
        return [self._parse_task(t) for t in data or []]

    def get_task(self, task_id: str) -> TaskOut:
        return self._parse_task(self._request("GET", f"/tasks/{task_id}"))

    def create_task(self, request: TaskRequest) -> TaskOut:
        return self._parse_task(self._request("POST", "/tasks", json=self._body(request)))

    def update_task(self, task_id: str, request: TaskRequest) -> TaskOut:
        return self._parse_task(self._request("PUT", f"/tasks/{task_id}", json=self._body(request)))

    def delete_task(self, task_id: str) -> str:
        data = self._request("DELETE", f"/tasks/{task_id}")
        if data is None:
            return ""
        if not isinstance(data, dict):
            raise ApiError("Unreadable response from the task service")
        return str(data.get("message", ""))


# PUBLIC_INTERFACE
class OperationState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    APPLIED = "applied"
    FAILED = "failed"


# PUBLIC_INTERFACE
@dataclass
class Operation:
    """One client-originated mutation and where it got to."""

    kind: str
    task_id: Optional[str] = None
    state: OperationState = OperationState.IDLE
    error: Optional[str] = None


# PUBLIC_INTERFACE
class BoardBusy(Exception):
    """A mutation was requested while another one is still pending."""


# PUBLIC_INTERFACE
class TaskBoard:
    """
    Local, eventually consistent copy of the server's task list.

    Reconciliation rule: on success the server's representation replaces (or is
    appended to, or removed from) the local list; on failure the local list is
    left exactly as it was and the message is kept in `error`. Only one
    mutation may be pending at a time; `load` is not gated.
    """

    def __init__(self, api: TaskApi, today: Optional[Callable[[], date]] = None) -> None:
        self._api = api
        self._today = today or date.today
        self._tasks: List[TaskOut] = []
        self._pending = threading.Lock()
        self.error: Optional[str] = None
        self.last_operation: Optional[Operation] = None

    @property
    def tasks(self) -> List[TaskOut]:
        return list(self._tasks)

    @property
    def busy(self) -> bool:
        return self._pending.locked()

    def find(self, task_id: str) -> Optional[TaskOut]:
        return next((t for t in self._tasks if t.id == task_id), None)

    def overdue(self, task: TaskOut) -> bool:
        return is_overdue(task.completed, task.due_date, self._today())

    def load(self) -> bool:
        """
        Fetch the full list. On failure the local list is emptied and the error
        kept; calling load again is the retry.
        """
        try:
            tasks = self._api.get_tasks()
        except ApiError as e:
            self._tasks = []
            self.error = e.message
            return False
        self._tasks = tasks
        self.error = None
        return True

    @contextmanager
    def _mutation(self, kind: str, task_id: Optional[str] = None) -> Generator[Operation, None, None]:
        if not self._pending.acquire(blocking=False):
            raise BoardBusy(f"Cannot {kind} while another change is pending")
        op = Operation(kind=kind, task_id=task_id, state=OperationState.PENDING)
        self.last_operation = op
        try:
            yield op
        finally:
            self._pending.release()

    def _fail(self, op: Operation, message: str) -> Operation:
        op.state = OperationState.FAILED
        op.error = message
        self.error = message
        return op

    def _applied(self, op: Operation) -> Operation:
        op.state = OperationState.APPLIED
        self.error = None
        return op

    def _replace(self, task: TaskOut) -> None:
        self._tasks = [task if t.id == task.id else t for t in self._tasks]

    def add(self, title: str, due_date: DueDateInput) -> Operation:
        """
        Create a task from UI input. Invalid input fails without a network call.
        """
        with self._mutation("create") as op:
            try:
                request = TaskRequest(title=normalize_title(title), due_date=parse_date_input(due_date))
            except ValueError as e:
                return self._fail(op, str(e))
            try:
                created = self._api.create_task(request)
            except ApiError as e:
                return self._fail(op, e.message)
            op.task_id = created.id
            self._tasks = self._tasks + [created]
            return self._applied(op)

    def _send_update(self, op: Operation, current: TaskOut, **changes: Any) -> Operation:
        try:
            updated = self._api.update_task(current.id, current.to_request(**changes))
        except ApiError as e:
            return self._fail(op, e.message)
        self._replace(updated)
        return self._applied(op)

    def toggle(self, task_id: str) -> Operation:
        """
        Ask the server to flip completion. The local flag changes only when the
        server's updated task comes back.
        """
        with self._mutation("toggle", task_id) as op:
            current = self.find(task_id)
            if current is None:
                return self._fail(op, "Task not found")
            return self._send_update(op, current, completed=not current.completed)

    def edit(
        self,
        task_id: str,
        title: Optional[str] = None,
        due_date: Optional[DueDateInput] = None,
    ) -> Operation:
        with self._mutation("edit", task_id) as op:
            current = self.find(task_id)
            if current is None:
                return self._fail(op, "Task not found")
            changes: Dict[str, Any] = {}
            try:
                if title is not None:
                    changes["title"] = normalize_title(title)
                if due_date is not None:
                    changes["due_date"] = parse_date_input(due_date)
            except ValueError as e:
                return self._fail(op, str(e))
            return self._send_update(op, current, **changes)

    def remove(self, task_id: str) -> Operation:
        with self._mutation("delete", task_id) as op:
            try:
                self._api.delete_task(task_id)
            except ApiError as e:
                return self._fail(op, e.message)
            self._tasks = [t for t in self._tasks if t.id != task_id]
            return self._applied(op)
