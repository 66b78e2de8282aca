"""
Unit tests for the content loading failure taxonomy.
"""

import pytest

from cityguide.ingestion.errors import (
    ContentLoadError,
    EmptyResult,
    FailureReason,
    MalformedEnvelope,
    MalformedPayload,
    ParseFailure,
    SourceUnavailable,
)


class TestContentLoadError:
    """Tests for the error classes."""

    def test_str_includes_kind(self):
        assert str(SourceUnavailable("timed out", kind="events")) == "[events] timed out"
        assert str(EmptyResult("no rows")) == "no rows"

    @pytest.mark.parametrize(
        "error_class,reason",
        [
            (SourceUnavailable, FailureReason.SOURCE_UNAVAILABLE),
            (MalformedEnvelope, FailureReason.MALFORMED_ENVELOPE),
            (MalformedPayload, FailureReason.MALFORMED_PAYLOAD),
            (EmptyResult, FailureReason.EMPTY_RESULT),
        ],
    )
    def test_reasons(self, error_class, reason):
        """Should tag each subclass with its failure reason."""
        error = error_class("x")
        assert isinstance(error, ContentLoadError)
        assert error.reason is reason


class TestParseFailure:
    """Tests for ParseFailure conversions."""

    def test_from_error(self):
        failure = ParseFailure.from_error(MalformedEnvelope("no wrapper"))
        assert failure == ParseFailure(reason=FailureReason.MALFORMED_ENVELOPE, detail="no wrapper")

    def test_to_error_rebuilds_matching_class(self):
        """Should rebuild the subclass for the reason, carrying the kind."""
        error = ParseFailure(FailureReason.EMPTY_RESULT, "no rows").to_error(kind="articles")

        assert isinstance(error, EmptyResult)
        assert error.kind == "articles"
        assert error.message == "no rows"
