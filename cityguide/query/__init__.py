"""
Pure query engine over held record sets.

Nothing here does I/O or mutates its inputs; callers pass the records they
currently hold together with explicit filter parameters.
"""

from .articles import (
    ArticleQuery,
    find_by_slug,
    pillar_articles,
    query_articles,
    related_articles,
)
from .dates import current_week_start, day_key, is_within_week, monday_of, shift_week, week_bounds, week_days
from .events import (
    DayBucket,
    EventQuery,
    bucket_by_day,
    event_categories_in_use,
    featured_events,
    find_event,
    query_events,
)
from .search import SearchResults, global_search

__all__ = [
    "ArticleQuery",
    "find_by_slug",
    "pillar_articles",
    "query_articles",
    "related_articles",
    "current_week_start",
    "day_key",
    "is_within_week",
    "monday_of",
    "shift_week",
    "week_bounds",
    "week_days",
    "DayBucket",
    "EventQuery",
    "bucket_by_day",
    "event_categories_in_use",
    "featured_events",
    "find_event",
    "query_events",
    "SearchResults",
    "global_search",
]
