"""Site-wide search across events and articles."""

from dataclasses import dataclass, field
from typing import Iterable, List

from cityguide.schemas.content import Article, Event

DEFAULT_SEARCH_LIMIT = 5


@dataclass
class SearchResults:
    events: List[Event] = field(default_factory=list)
    articles: List[Article] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.events and not self.articles


def _any_contains(needle: str, *values) -> bool:
    return any(needle in (value or "").lower() for value in values)


def global_search(
    events: Iterable[Event],
    articles: Iterable[Article],
    query: str,
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> SearchResults:
    """
    Case-insensitive substring search.

    Events match on title, venue, neighborhood or category; articles on
    title or neighborhood. No ranking: the first ``limit`` matches of each
    kind are returned in held order. A blank query matches nothing.
    """
    if not query or not query.strip():
        return SearchResults()

    needle = query.lower()
    matched_events = [
        e for e in events
        if _any_contains(needle, e.title, e.venue_name, e.neighborhood, e.category)
    ]
    matched_articles = [a for a in articles if _any_contains(needle, a.title, a.neighborhood)]
    return SearchResults(events=matched_events[:limit], articles=matched_articles[:limit])
