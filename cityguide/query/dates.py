"""
Week and day helpers for the events calendar.

Weeks run Monday through Sunday. All values are naive local date-times;
the calendar has no notion of time zones.
"""

from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

WEEK_LENGTH = 7


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def monday_of(value: date | datetime) -> date:
    """Return the Monday of the week containing ``value`` (Sunday is day 7)."""
    d = _as_date(value)
    return d - timedelta(days=d.weekday())


def week_bounds(week_start: date | datetime) -> Tuple[datetime, datetime]:
    """
    Return the inclusive window of a week.

    The window runs from Monday 00:00:00 to Sunday 23:59:59 with zero
    microseconds, so anything later in that final second is outside.
    """
    monday = monday_of(week_start)
    start = datetime.combine(monday, time.min)
    end = datetime.combine(monday + timedelta(days=WEEK_LENGTH - 1), time(23, 59, 59))
    return start, end


def is_within_week(moment: Optional[datetime], week_start: date | datetime) -> bool:
    """Whether a date-time falls inside the week window; None never does."""
    if moment is None:
        return False
    start, end = week_bounds(week_start)
    return start <= moment <= end


def day_key(value: date | datetime) -> str:
    """Calendar-day key (ISO date) used for day buckets."""
    return _as_date(value).isoformat()


def week_days(week_start: date | datetime) -> List[date]:
    """The seven dates of the week, Monday first."""
    monday = monday_of(week_start)
    return [monday + timedelta(days=i) for i in range(WEEK_LENGTH)]


def shift_week(week_start: date | datetime, weeks: int) -> date:
    """Move a week selection forwards or backwards by whole weeks."""
    return monday_of(week_start) + timedelta(weeks=weeks)


def current_week_start(today: Optional[date] = None) -> date:
    return monday_of(today or date.today())
