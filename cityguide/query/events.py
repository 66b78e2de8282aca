"""
Event queries for the calendar view.

All functions are pure: inputs are never mutated and every result is a new
list or mapping.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from cityguide.query.dates import day_key, is_within_week, monday_of, week_days
from cityguide.schemas.content import ALL_FILTER, Event


@dataclass(frozen=True)
class EventQuery:
    """Calendar filter state."""

    week_start: date
    search_text: str = ""
    category: str = ALL_FILTER

    def __post_init__(self):
        object.__setattr__(self, "week_start", monday_of(self.week_start))


@dataclass
class DayBucket:
    """Events starting on one calendar day."""

    date: date
    events: List[Event] = field(default_factory=list)


def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle in (haystack or "").lower()


def matches_event(event: Event, query: EventQuery) -> bool:
    """Inclusion test for one event."""
    needle = query.search_text.lower()
    if needle and not (_contains(event.title, needle) or _contains(event.venue_name, needle)):
        return False
    if query.category != ALL_FILTER and event.category != query.category:
        return False
    return is_within_week(event.start_datetime, query.week_start)


def event_sort_key(event: Event):
    """Featured first, then chronological; undated events sort last."""
    return (not event.featured, event.start_datetime or datetime.max)


def query_events(events: Iterable[Event], query: EventQuery) -> List[Event]:
    """
    Filter events to one week and sort them for display.

    Ties keep their input order.
    """
    return sorted((e for e in events if matches_event(e, query)), key=event_sort_key)


def bucket_by_day(events: Iterable[Event], week_start: date) -> Dict[str, DayBucket]:
    """
    Group events into the seven days of a week.

    Exactly seven buckets are returned, Monday first, keyed by ISO date.
    Events starting outside the week are dropped.
    """
    buckets = {day_key(d): DayBucket(date=d) for d in week_days(week_start)}
    for event in events:
        if event.start_datetime is None:
            continue
        bucket = buckets.get(day_key(event.start_datetime))
        if bucket is not None:
            bucket.events.append(event)
    return buckets


def find_event(events: Iterable[Event], event_id: str) -> Optional[Event]:
    """Look up an event by id or slug."""
    for event in events:
        if event.id == event_id or (event.slug and event.slug == event_id):
            return event
    return None


def featured_events(events: Iterable[Event], limit: int = 4) -> List[Event]:
    """Featured events in held order, for the home page."""
    return [e for e in events if e.featured][:limit]


def event_categories_in_use(events: Iterable[Event]) -> List[str]:
    """Distinct non-empty categories, sorted."""
    return sorted({e.category for e in events if e.category})
