from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A lightweight domain model representing a Task for the storage backends.

    Fields:
    - id: Opaque unique identifier (UUID string), assigned by the service
    - title: Short title (1..255 chars, trimmed on input)
    - due_date: Aware UTC due datetime
    - completed: Boolean completion flag
    - created_at: Aware UTC creation timestamp, fixed at creation
    - updated_at: Aware UTC timestamp of the last successful mutation
    """

    id: str
    title: str
    due_date: datetime
    completed: bool
    created_at: datetime
    updated_at: datetime
