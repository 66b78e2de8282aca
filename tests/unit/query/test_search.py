"""
Unit tests for the site-wide search.
"""

from cityguide.query.search import SearchResults, global_search


class TestGlobalSearch:
    """Tests for global_search."""

    def test_jazz_finds_only_brunch(self, fallback_events, fallback_articles):
        """Should find the brunch event and no articles."""
        results = global_search(fallback_events, fallback_articles, "jazz")

        assert [e.title for e in results.events] == ["Sunday Brunch Jazz"]
        assert results.articles == []

    def test_blank_query_returns_nothing(self, fallback_events, fallback_articles):
        assert global_search(fallback_events, fallback_articles, "").is_empty
        assert global_search(fallback_events, fallback_articles, "   ").is_empty

    def test_limit_per_kind(self, fallback_events, fallback_articles):
        """Should cap each kind at five results in held order."""
        results = global_search(fallback_events, fallback_articles, "milwaukee")

        assert len(results.articles) == 5
        assert results.articles[0].id == "pillar-1"

    def test_event_fields_searched(self, create_event):
        events = [
            create_event(title="A", venueName="Fiserv Forum"),
            create_event(title="B", neighborhood="Bay View"),
            create_event(title="C", category="Comedy"),
        ]

        assert [e.title for e in global_search(events, [], "forum").events] == ["A"]
        assert [e.title for e in global_search(events, [], "BAY VIEW").events] == ["B"]
        assert [e.title for e in global_search(events, [], "comedy").events] == ["C"]

    def test_article_neighborhood_searched(self, create_article):
        article = create_article(title="Guide", neighborhood="Walker's Point")
        assert global_search([], [article], "walker").articles == [article]

    def test_custom_limit(self, create_event):
        events = [create_event(title=f"Jazz {i}") for i in range(8)]
        assert len(global_search(events, [], "jazz", limit=2).events) == 2


class TestSearchResults:
    """Tests for SearchResults."""

    def test_is_empty(self):
        assert SearchResults().is_empty is True
        assert SearchResults(events=[object()]).is_empty is False
