"""
Unit tests for the event queries.
"""

from datetime import date, datetime

from cityguide.query.events import (
    EventQuery,
    bucket_by_day,
    event_categories_in_use,
    event_sort_key,
    featured_events,
    find_event,
    matches_event,
    query_events,
)

WEEK = date(2026, 1, 19)


class TestEventQuery:
    """Tests for EventQuery."""

    def test_week_start_normalized_to_monday(self):
        """Should snap any date to the Monday of its week."""
        assert EventQuery(week_start=date(2026, 1, 23)).week_start == WEEK

    def test_defaults(self):
        query = EventQuery(week_start=WEEK)
        assert query.search_text == ""
        assert query.category == "All"


class TestMatchesEvent:
    """Tests for matches_event."""

    def test_search_matches_title_or_venue(self, create_event):
        """Should match the search text against title and venue only."""
        event = create_event(title="Trivia Night", venueName="Landmark Lanes", neighborhood="East Side")

        assert matches_event(event, EventQuery(WEEK, search_text="TRIVIA"))
        assert matches_event(event, EventQuery(WEEK, search_text="landmark"))
        assert not matches_event(event, EventQuery(WEEK, search_text="east side"))

    def test_search_is_not_trimmed(self, create_event):
        """Should match the search text exactly as typed, spaces included."""
        event = create_event(title="Sunday Brunch Jazz", venueName="Blu")

        assert not matches_event(event, EventQuery(WEEK, search_text="jazz "))
        assert matches_event(event, EventQuery(WEEK, search_text="brunch jazz"))

    def test_whitespace_search_needs_a_space(self, create_event):
        spaced = create_event(title="Open Mic", venueName="Cafe")
        single = create_event(title="Trivia", venueName="Lanes")

        assert matches_event(spaced, EventQuery(WEEK, search_text=" "))
        assert not matches_event(single, EventQuery(WEEK, search_text="   "))

    def test_empty_search_matches_everything(self, create_event):
        assert matches_event(create_event(), EventQuery(WEEK, search_text=""))

    def test_category_exact_match(self, create_event):
        event = create_event(category="Food & Drink")
        assert matches_event(event, EventQuery(WEEK, category="Food & Drink"))
        assert not matches_event(event, EventQuery(WEEK, category="food & drink"))

    def test_outside_week_excluded(self, create_event):
        assert not matches_event(create_event(start_datetime=datetime(2026, 1, 26, 0, 0)), EventQuery(WEEK))

    def test_unparseable_start_excluded(self, create_event):
        """Should never show an event without a valid start."""
        assert not matches_event(create_event(start_datetime="not a date"), EventQuery(WEEK))


class TestQueryEvents:
    """Tests for query_events."""

    def test_featured_first_then_chronological(self, create_event):
        """Should put featured events first, each group by start time."""
        late_plain = create_event(title="late", start_datetime=datetime(2026, 1, 24, 20, 0))
        early_plain = create_event(title="early", start_datetime=datetime(2026, 1, 19, 8, 0))
        late_featured = create_event(title="featured", start_datetime=datetime(2026, 1, 25, 12, 0), featured=True)

        result = query_events([late_plain, early_plain, late_featured], EventQuery(WEEK))

        assert [e.title for e in result] == ["featured", "early", "late"]

    def test_ties_keep_input_order(self, create_event):
        start = datetime(2026, 1, 20, 19, 0)
        first = create_event(title="first", start_datetime=start)
        second = create_event(title="second", start_datetime=start)

        assert [e.title for e in query_events([first, second], EventQuery(WEEK))] == ["first", "second"]

    def test_input_not_mutated(self, create_event):
        events = [create_event(start_datetime=datetime(2026, 1, 21)), create_event(featured=True)]
        snapshot = list(events)

        query_events(events, EventQuery(WEEK))

        assert events == snapshot

    def test_fallback_week(self, fallback_events):
        """Should return the fallback events of the week of 19 January."""
        result = query_events(fallback_events, EventQuery(WEEK))
        assert [e.id for e in result] == ["5", "7", "6", "12", "13", "14", "8"]

    def test_fallback_food_and_drink(self, fallback_events):
        """Should exclude the brewery tour on the Sunday before."""
        result = query_events(fallback_events, EventQuery(WEEK, category="Food & Drink"))
        assert [e.id for e in result] == ["7", "6"]

    def test_undated_sorts_last(self, create_event):
        assert event_sort_key(create_event(start_datetime=None))[1] == datetime.max


class TestBucketByDay:
    """Tests for bucket_by_day."""

    def test_always_seven_buckets(self):
        """Should return seven buckets even without events."""
        buckets = bucket_by_day([], WEEK)

        assert len(buckets) == 7
        assert list(buckets)[0] == "2026-01-19"
        assert list(buckets)[-1] == "2026-01-25"
        assert all(b.events == [] for b in buckets.values())

    def test_events_land_on_start_day(self, fallback_events):
        buckets = bucket_by_day(query_events(fallback_events, EventQuery(WEEK)), WEEK)

        assert [e.id for e in buckets["2026-01-19"].events] == ["5", "6"]
        assert [e.id for e in buckets["2026-01-23"].events] == ["7"]
        assert buckets["2026-01-24"].events == []
        assert buckets["2026-01-19"].date == WEEK

    def test_outside_events_dropped(self, create_event):
        buckets = bucket_by_day([create_event(start_datetime=datetime(2026, 1, 26, 9, 0))], WEEK)
        assert sum(len(b.events) for b in buckets.values()) == 0


class TestEventLookups:
    """Tests for find_event, featured_events and event_categories_in_use."""

    def test_find_by_id_or_slug(self, fallback_events):
        assert find_event(fallback_events, "6").title == "Sunday Brunch Jazz"
        assert find_event(fallback_events, "brunch-jazz").id == "6"
        assert find_event(fallback_events, "missing") is None

    def test_featured_events_limit(self, fallback_events):
        assert [e.id for e in featured_events(fallback_events)] == ["1", "2", "5", "7"]
        assert len(featured_events(fallback_events, limit=10)) == 5

    def test_categories_in_use(self, create_event):
        events = [create_event(category="Sports"), create_event(category="Arts"), create_event(category="")]
        assert event_categories_in_use(events) == ["Arts", "Sports"]
