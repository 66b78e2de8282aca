"""
Unit tests for the bundled fallback record sets.
"""

import json

from cityguide.ingestion.fallback import load_all_fallbacks, load_fallback_records
from cityguide.schemas.content import Article, ContentKind, Event


class TestLoadFallbackRecords:
    """Tests for load_fallback_records."""

    def test_events(self, fallback_events):
        """Should load the bundled events as typed records."""
        assert len(fallback_events) == 14
        assert all(isinstance(e, Event) for e in fallback_events)
        assert all(e.has_valid_start for e in fallback_events)

    def test_articles(self, fallback_articles):
        assert len(fallback_articles) == 17
        assert all(isinstance(a, Article) for a in fallback_articles)
        assert sum(1 for a in fallback_articles if a.is_pillar) == 5

    def test_kinds_without_fallback_are_empty(self):
        assert load_fallback_records(ContentKind.PARTNERS) == []
        assert load_fallback_records("neighborhoods") == []

    def test_custom_path(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text(json.dumps([{"id": "x", "title": "Custom"}]), encoding="utf-8")

        records = load_fallback_records(ContentKind.EVENTS, path=path)

        assert [r.title for r in records] == ["Custom"]

    def test_load_all(self):
        fallbacks = load_all_fallbacks()
        assert set(fallbacks) == set(ContentKind)
        assert len(fallbacks[ContentKind.EVENTS]) == 14
