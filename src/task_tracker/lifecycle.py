"""
Task lifecycle rules shared by the service and the client.

Due dates travel as full UTC timestamps. A date-only value is pinned to
midnight UTC of that calendar day, and the overdue rule compares calendar days
only, so a due date never drifts by a day between client and server.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Optional, Union

TITLE_MAX_LENGTH = 255

DueDateInput = Union[date, datetime, str]

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    try:
        return value.astimezone(timezone.utc)
    except OverflowError as e:
        # offsets near year 1 or 9999 push the UTC instant out of range
        raise ValueError("Invalid dueDate: out of range") from e


def _midnight_utc(value: date) -> datetime:
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


# PUBLIC_INTERFACE
def normalize_due_date(value: Optional[DueDateInput]) -> datetime:
    """
    Normalize a due date into an aware UTC datetime.

    - datetime: naive values are taken as UTC, aware values converted to UTC.
    - date: promoted to midnight UTC of the same calendar day.
    - str: ISO8601 date or datetime ('2025-01-31', '2025-01-31T13:45:00Z').

    Raises:
        ValueError: the value is missing or not an unambiguous ISO8601 value.
    """
    if value is None:
        raise ValueError("dueDate is required")

    if isinstance(value, datetime):
        return _as_utc(value)

    if isinstance(value, date):
        return _midnight_utc(value)

    if isinstance(value, str):
        s = value.strip()
        if not s:
            raise ValueError("dueDate is required")
        if _DATE_ONLY.match(s):
            try:
                return _midnight_utc(date.fromisoformat(s))
            except ValueError as e:
                raise ValueError(f"Invalid dueDate: {s!r} is not a calendar date") from e
        # fromisoformat only learned the 'Z' suffix in 3.11
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            return _as_utc(datetime.fromisoformat(s))
        except ValueError as e:
            raise ValueError(
                "Invalid dueDate format. Use an ISO8601 date or timestamp "
                "(e.g., '2025-01-31' or '2025-01-31T13:45:00Z')."
            ) from e

    raise ValueError("Invalid type for dueDate; expected date, datetime, or ISO8601 string.")


# PUBLIC_INTERFACE
def parse_date_input(value: DueDateInput) -> datetime:
    """
    Parse a date picked in the UI into the timestamp sent over the wire.

    Strings must be exactly YYYY-MM-DD. Locale-dependent forms such as
    01/02/2024 are rejected instead of guessed.
    """
    if isinstance(value, str):
        s = value.strip()
        if not _DATE_ONLY.match(s):
            raise ValueError("Due date must be a calendar date in YYYY-MM-DD form")
        return normalize_due_date(s)
    return normalize_due_date(value)


# PUBLIC_INTERFACE
def normalize_title(value: Optional[str]) -> str:
    """Strip whitespace and enforce 1..TITLE_MAX_LENGTH characters."""
    if value is None:
        raise ValueError("title is required")
    if not isinstance(value, str):
        raise ValueError("title must be a string")
    s = value.strip()
    if not s:
        raise ValueError("title must not be empty")
    if len(s) > TITLE_MAX_LENGTH:
        raise ValueError(f"title must be at most {TITLE_MAX_LENGTH} characters")
    return s


# PUBLIC_INTERFACE
def is_overdue(completed: bool, due_date: Union[date, datetime], today: date) -> bool:
    """
    A task is overdue when it is not completed and today is strictly after the
    calendar day it was due. Time of day is ignored.
    """
    due_day = due_date.date() if isinstance(due_date, datetime) else due_date
    return not completed and today > due_day
