from datetime import date, datetime, timedelta, timezone

import pytest

from task_tracker.lifecycle import (
    TITLE_MAX_LENGTH,
    is_overdue,
    normalize_due_date,
    normalize_title,
    parse_date_input,
)

UTC = timezone.utc


class TestOverdue:
    def test_past_due_incomplete(self):
        assert is_overdue(False, datetime(2024, 1, 1, tzinfo=UTC), date(2024, 6, 1)) is True

    def test_past_due_completed(self):
        assert is_overdue(True, datetime(2024, 1, 1, tzinfo=UTC), date(2024, 6, 1)) is False

    def test_due_today_is_not_overdue(self):
        # Time of day is ignored, even late in the day
        assert is_overdue(False, datetime(2024, 6, 1, 0, 0, tzinfo=UTC), date(2024, 6, 1)) is False
        assert is_overdue(False, datetime(2024, 6, 1, 23, 59, tzinfo=UTC), date(2024, 6, 1)) is False

    def test_due_yesterday(self):
        assert is_overdue(False, datetime(2024, 5, 31, 23, 59, tzinfo=UTC), date(2024, 6, 1)) is True

    def test_accepts_plain_date(self):
        assert is_overdue(False, date(2024, 5, 31), date(2024, 6, 1)) is True


class TestNormalizeDueDate:
    def test_date_only_string_is_midnight_utc(self):
        assert normalize_due_date("2024-05-01") == datetime(2024, 5, 1, tzinfo=UTC)

    def test_zulu_timestamp(self):
        value = normalize_due_date("2024-05-01T00:00:00Z")
        assert value == datetime(2024, 5, 1, tzinfo=UTC)
        assert value.utcoffset() == timedelta(0)

    def test_offset_timestamp_converted_to_utc(self):
        value = normalize_due_date("2024-05-01T09:00:00+09:00")
        assert value == datetime(2024, 5, 1, 0, 0, tzinfo=UTC)
        assert value.tzinfo == UTC

    def test_naive_values_are_utc(self):
        assert normalize_due_date("2024-05-01T12:30:00") == datetime(2024, 5, 1, 12, 30, tzinfo=UTC)
        assert normalize_due_date(datetime(2024, 5, 1, 12, 30)) == datetime(2024, 5, 1, 12, 30, tzinfo=UTC)

    def test_date_object(self):
        assert normalize_due_date(date(2024, 5, 1)) == datetime(2024, 5, 1, tzinfo=UTC)

    @pytest.mark.parametrize("value", [None, "", "  ", "not-a-date", "2024-13-01", "05/01/2024", 20240501])
    def test_rejects(self, value):
        with pytest.raises(ValueError):
            normalize_due_date(value)

    @pytest.mark.parametrize("value", ["9999-12-31T23:00:00-05:00", "0001-01-01T00:30:00+01:00"])
    def test_offset_past_the_calendar_edge(self, value):
        # The UTC instant falls in year 10000 or year 0
        with pytest.raises(ValueError, match="out of range"):
            normalize_due_date(value)


class TestParseDateInput:
    def test_calendar_date(self):
        assert parse_date_input(" 2024-05-01 ") == datetime(2024, 5, 1, tzinfo=UTC)

    @pytest.mark.parametrize("value", ["05/01/2024", "01-05-2024", "2024-05-01T00:00:00Z", "May 1 2024"])
    def test_rejects_anything_but_iso_date(self, value):
        with pytest.raises(ValueError):
            parse_date_input(value)


class TestNormalizeTitle:
    def test_strips(self):
        assert normalize_title("  Buy milk \n") == "Buy milk"

    @pytest.mark.parametrize("value", [None, "", "   ", "x" * (TITLE_MAX_LENGTH + 1), 42])
    def test_rejects(self, value):
        with pytest.raises(ValueError):
            normalize_title(value)

    def test_max_length_allowed(self):
        assert normalize_title("x" * TITLE_MAX_LENGTH) == "x" * TITLE_MAX_LENGTH
