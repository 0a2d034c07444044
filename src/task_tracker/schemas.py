from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .lifecycle import DueDateInput, normalize_due_date, normalize_title

# Wire format is camelCase; snake_case keys are accepted on input as well.
_WIRE_CONFIG = dict(alias_generator=to_camel, populate_by_name=True)


# PUBLIC_INTERFACE
class TaskRequest(BaseModel):
    """
    Schema for creating or replacing a Task.

    Clients never supply id or timestamps; such keys are ignored.
    """

    model_config = ConfigDict(
        **_WIRE_CONFIG,
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "dueDate": "2024-05-01T00:00:00Z",
                "completed": False,
            }
        },
    )

    title: str = Field(..., description="Short title for the task")
    due_date: datetime = Field(
        ...,
        description="Due date/time as an ISO8601 timestamp; date-only values are pinned to 00:00 UTC",
    )
    completed: bool = Field(default=False, description="Completion status flag")

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        """
        Strip whitespace and enforce a non-empty title.
        """
        return normalize_title(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> datetime:
        """
        Normalize due_date from str/date/datetime to an aware UTC datetime.
        """
        return normalize_due_date(v)


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a Task.
    """

    model_config = ConfigDict(
        **_WIRE_CONFIG,
        json_schema_extra={
            "example": {
                "id": "9b2f4c1e-6f0a-4c43-9a57-2d8f0e7f1b11",
                "title": "Buy milk",
                "dueDate": "2024-05-01T00:00:00Z",
                "completed": False,
                "createdAt": "2024-04-20T10:15:30.123456Z",
                "updatedAt": "2024-04-20T10:15:30.123456Z",
            }
        },
    )

    id: str = Field(..., description="Unique identifier of the task")
    title: str = Field(..., description="Short title for the task")
    due_date: datetime = Field(..., description="Due date/time as an ISO8601 timestamp")
    completed: bool = Field(..., description="Completion status flag")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")

    def to_request(self, **changes) -> TaskRequest:
        """
        Full representation to send back on update, with selected fields replaced.
        """
        fields = {"title": self.title, "due_date": self.due_date, "completed": self.completed}
        fields.update(changes)
        return TaskRequest(**fields)


# PUBLIC_INTERFACE
class MessageOut(BaseModel):
    """Confirmation body for operations that return no resource."""

    message: str = Field(..., description="Human-readable confirmation")


# PUBLIC_INTERFACE
class ErrorOut(BaseModel):
    """Error body returned for every failed request."""

    error: str = Field(..., description="Error kind, e.g. NotFound or ValidationError")
    message: str = Field(..., description="Human-readable error message")
