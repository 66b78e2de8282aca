"""
Unit tests for the week helpers.
"""

from datetime import date, datetime

import pytest

from cityguide.query.dates import (
    current_week_start,
    day_key,
    is_within_week,
    monday_of,
    shift_week,
    week_bounds,
    week_days,
)

WEEK = date(2026, 1, 19)  # a Monday


class TestMondayOf:
    """Tests for monday_of."""

    @pytest.mark.parametrize(
        "value",
        [date(2026, 1, 19), date(2026, 1, 21), date(2026, 1, 25), datetime(2026, 1, 25, 23, 0)],
    )
    def test_days_of_week_map_to_monday(self, value):
        """Should treat Sunday as the last day of the week."""
        assert monday_of(value) == WEEK

    def test_next_monday_starts_new_week(self):
        assert monday_of(date(2026, 1, 26)) == date(2026, 1, 26)


class TestWeekBounds:
    """Tests for week_bounds and is_within_week."""

    def test_bounds(self):
        """Should run Monday 00:00:00 through Sunday 23:59:59."""
        start, end = week_bounds(WEEK)
        assert start == datetime(2026, 1, 19, 0, 0, 0)
        assert end == datetime(2026, 1, 25, 23, 59, 59)
        assert end.microsecond == 0

    def test_monday_midnight_is_included(self):
        assert is_within_week(datetime(2026, 1, 19, 0, 0, 0), WEEK) is True

    def test_last_whole_second_is_included(self):
        assert is_within_week(datetime(2026, 1, 25, 23, 59, 59), WEEK) is True

    def test_fraction_of_last_second_is_excluded(self):
        """Should exclude instants after Sunday 23:59:59.000."""
        assert is_within_week(datetime(2026, 1, 25, 23, 59, 59, 999000), WEEK) is False

    def test_previous_sunday_is_excluded(self):
        assert is_within_week(datetime(2026, 1, 18, 23, 59, 59), WEEK) is False

    def test_none_is_never_within(self):
        assert is_within_week(None, WEEK) is False


class TestWeekNavigation:
    """Tests for week_days, day_key, shift_week and current_week_start."""

    def test_week_days(self):
        days = week_days(date(2026, 1, 22))
        assert len(days) == 7
        assert days[0] == WEEK
        assert days[-1] == date(2026, 1, 25)

    def test_day_key_is_iso_date(self):
        assert day_key(datetime(2026, 1, 19, 10, 0)) == "2026-01-19"
        assert day_key(date(2026, 1, 19)) == "2026-01-19"

    def test_shift_week(self):
        assert shift_week(WEEK, 1) == date(2026, 1, 26)
        assert shift_week(date(2026, 1, 21), -1) == date(2026, 1, 12)

    def test_current_week_start(self):
        assert current_week_start(date(2026, 1, 24)) == WEEK
        assert current_week_start().weekday() == 0
