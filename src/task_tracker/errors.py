from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional


class TaskError(Exception):
    """
    Base class for task lifecycle errors.

    Each subclass carries the HTTP status it maps to and a message that is safe
    to return to clients. Internal details (driver errors, SQL) stay in logs.
    """

    status_code: int = 500
    default_message: str = "Task operation failed"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# PUBLIC_INTERFACE
class ValidationError(TaskError):
    """Bad or missing input. No mutation was attempted."""

    status_code = 400
    default_message = "Invalid task data"


# PUBLIC_INTERFACE
class NotFound(TaskError):
    """The operation targeted a task id that does not exist."""

    status_code = 404
    default_message = "Task not found"


# PUBLIC_INTERFACE
class StoreError(TaskError):
    """The underlying persistence layer failed."""

    status_code = 500
    default_message = "Failed to access task storage"


# PUBLIC_INTERFACE
class DuplicateKey(StoreError):
    """An insert collided with an existing task id."""

    default_message = "Task id already exists"


# PUBLIC_INTERFACE
def describe_errors(errors: Iterable[Mapping[str, Any]]) -> str:
    """
    Flatten pydantic error details into one human-readable line, e.g.
    "title: title must not be empty; dueDate: Field required".
    """
    parts = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        msg = str(err.get("msg", "invalid value"))
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "; ".join(parts) or ValidationError.default_message
