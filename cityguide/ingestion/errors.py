"""
Content loading failure taxonomy.

Every failure is handled the same way by the refresh orchestrator: the
condition is logged, the held record set is retained, and the next
scheduled refresh tries again.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FailureReason(str, Enum):
    """Why a refresh did not replace the held record set."""

    SOURCE_UNAVAILABLE = "source_unavailable"
    MALFORMED_ENVELOPE = "malformed_envelope"
    MALFORMED_PAYLOAD = "malformed_payload"
    EMPTY_RESULT = "empty_result"


class ContentLoadError(Exception):
    """Base class for content loading failures."""

    reason: FailureReason = FailureReason.MALFORMED_PAYLOAD

    def __init__(self, message: str, kind: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind

    def __str__(self) -> str:
        if self.kind:
            return f"[{self.kind}] {self.message}"
        return self.message


class SourceUnavailable(ContentLoadError):
    """Network failure reaching the tabular data source."""

    reason = FailureReason.SOURCE_UNAVAILABLE


class MalformedEnvelope(ContentLoadError):
    """Response body does not contain the expected wrapper."""

    reason = FailureReason.MALFORMED_ENVELOPE


class MalformedPayload(ContentLoadError):
    """JSON inside the envelope could not be parsed or traversed."""

    reason = FailureReason.MALFORMED_PAYLOAD


class EmptyResult(ContentLoadError):
    """Parse succeeded but yielded zero qualifying records."""

    reason = FailureReason.EMPTY_RESULT


@dataclass(frozen=True)
class ParseFailure:
    """The single 'parse failed' signal returned by the parser."""

    reason: FailureReason
    detail: str = ""

    @classmethod
    def from_error(cls, error: ContentLoadError) -> "ParseFailure":
        """Build a failure from a raised load error."""
        return cls(reason=error.reason, detail=error.message)

    def to_error(self, kind: Optional[str] = None) -> ContentLoadError:
        """Rebuild the matching load error, e.g. to re-raise in a refresh."""
        error_class = _ERRORS_BY_REASON.get(self.reason, MalformedPayload)
        return error_class(self.detail, kind=kind)


_ERRORS_BY_REASON = {
    cls.reason: cls for cls in (SourceUnavailable, MalformedEnvelope, MalformedPayload, EmptyResult)
}
