"""
Unit tests for the held record sets.
"""

from datetime import UTC, datetime, timedelta

from cityguide.ingestion.errors import FailureReason, ParseFailure
from cityguide.ingestion.store import ContentStore, HeldRecordSet, RecordOrigin
from cityguide.schemas.content import ContentKind, Event


def _events(*titles):
    return [Event(id=str(i), title=t) for i, t in enumerate(titles)]


class TestHeldRecordSet:
    """Tests for HeldRecordSet."""

    def test_starts_as_fallback(self):
        """Should start with fallback origin and no timestamps."""
        held = HeldRecordSet(ContentKind.EVENTS, _events("a", "b"))

        assert len(held) == 2
        assert held.origin == RecordOrigin.FALLBACK
        assert held.loaded_at is None
        assert held.last_checked_at is None
        assert held.in_flight is None

    def test_records_are_immutable_tuple(self):
        """Should expose records as a tuple."""
        held = HeldRecordSet("events", _events("a"))
        assert isinstance(held.records, tuple)

    def test_replace_swaps_whole_set(self):
        """Should replace every record and mark the source origin."""
        held = HeldRecordSet(ContentKind.EVENTS, _events("a", "b", "c"))
        now = datetime(2026, 1, 19, 12, 0, tzinfo=UTC)

        held.replace(_events("x"), now=now)

        assert [e.title for e in held.records] == ["x"]
        assert held.origin == RecordOrigin.SOURCE
        assert held.loaded_at == now
        assert held.last_checked_at == now
        assert held.last_error is None

    def test_failure_keeps_records(self):
        """Should keep the held records when a refresh fails."""
        held = HeldRecordSet(ContentKind.EVENTS, _events("a"))
        failure = ParseFailure(FailureReason.MALFORMED_ENVELOPE, "Invalid response format")

        held.record_failure(failure)

        assert [e.title for e in held.records] == ["a"]
        assert held.origin == RecordOrigin.FALLBACK
        assert held.last_error == failure
        assert held.last_checked_at is not None

    def test_never_checked_is_stale(self):
        """Should be stale before the first check."""
        assert HeldRecordSet(ContentKind.EVENTS, refresh_interval_seconds=300).is_stale() is True

    def test_stale_after_interval(self):
        """Should go stale once the interval has elapsed."""
        held = HeldRecordSet(ContentKind.EVENTS, refresh_interval_seconds=300)
        checked = datetime(2026, 1, 19, 12, 0, tzinfo=UTC)
        held.replace(_events("a"), now=checked)

        assert held.is_stale(checked + timedelta(seconds=299)) is False
        assert held.is_stale(checked + timedelta(seconds=300)) is True

    def test_no_interval_never_stale_after_check(self):
        """Should never go stale without an interval once checked."""
        held = HeldRecordSet(ContentKind.PARTNERS)
        held.replace([], now=datetime(2020, 1, 1, tzinfo=UTC))
        assert held.is_stale() is False

    def test_describe(self):
        """Should summarize the set for health reporting."""
        held = HeldRecordSet(ContentKind.EVENTS, _events("a"))
        held.record_failure(ParseFailure(FailureReason.EMPTY_RESULT))

        summary = held.describe()

        assert summary["kind"] == "events"
        assert summary["count"] == 1
        assert summary["origin"] == "fallback"
        assert summary["last_error"] == "empty_result"
        assert summary["refreshing"] is False


class TestContentStore:
    """Tests for ContentStore."""

    def test_every_kind_has_a_set(self):
        """Should hold an empty set for every kind by default."""
        store = ContentStore()
        for kind in ContentKind:
            assert len(store[kind]) == 0

    def test_with_fallbacks(self):
        """Should seed events and articles from the bundled sets."""
        store = ContentStore.with_fallbacks()

        assert len(store.events) == 14
        assert len(store.articles) == 17
        assert store.partners == []
        assert store.neighborhoods == []

    def test_records_returns_a_copy(self):
        """Should hand out a new list each time."""
        store = ContentStore({ContentKind.EVENTS: HeldRecordSet(ContentKind.EVENTS, _events("a"))})

        events = store.events
        events.clear()

        assert len(store.events) == 1

    def test_lookup_by_name(self):
        """Should accept the kind name as a key."""
        store = ContentStore()
        assert store["articles"] is store[ContentKind.ARTICLES]

    def test_describe_lists_all_kinds(self):
        """Should describe every held set."""
        kinds = [entry["kind"] for entry in ContentStore().describe()]
        assert sorted(kinds) == ["articles", "events", "neighborhoods", "partners"]
