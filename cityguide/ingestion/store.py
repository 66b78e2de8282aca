"""
Held record sets.

Each content kind owns one HeldRecordSet: the records currently considered
authoritative, where they came from, and when they were last checked. A
successful refresh swaps the whole tuple; a failed one only records the
failure. Readers always get a complete set, never a partial merge.
"""

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from cityguide.ingestion.errors import ParseFailure
from cityguide.ingestion.fallback import load_fallback_records
from cityguide.schemas.content import ContentKind, ContentRecord

logger = logging.getLogger(__name__)


class RecordOrigin(str, Enum):
    """Where the held records came from."""

    FALLBACK = "fallback"
    SOURCE = "source"


class HeldRecordSet:
    """
    The current record set of one content kind.

    ``in_flight`` holds the running refresh task, if any, so concurrent
    refresh requests for the same kind share a single fetch.
    """

    def __init__(
        self,
        kind: ContentKind,
        records: Iterable[ContentRecord] = (),
        refresh_interval_seconds: Optional[float] = None,
    ):
        self.kind = ContentKind(kind)
        self._records: Tuple[ContentRecord, ...] = tuple(records)
        self.origin = RecordOrigin.FALLBACK
        self.refresh_interval_seconds = refresh_interval_seconds
        self.loaded_at: Optional[datetime] = None
        self.last_checked_at: Optional[datetime] = None
        self.last_error: Optional[ParseFailure] = None
        self.in_flight: Optional[asyncio.Task] = None

    @property
    def records(self) -> Tuple[ContentRecord, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def replace(self, records: Iterable[ContentRecord], now: Optional[datetime] = None) -> None:
        """Swap in a freshly loaded record set."""
        now = now or datetime.now(UTC)
        self._records = tuple(records)
        self.origin = RecordOrigin.SOURCE
        self.loaded_at = now
        self.last_checked_at = now
        self.last_error = None

    def record_failure(self, failure: ParseFailure, now: Optional[datetime] = None) -> None:
        """Note a failed refresh; the held records are left untouched."""
        self.last_checked_at = now or datetime.now(UTC)
        self.last_error = failure

    def is_stale(self, now: Optional[datetime] = None) -> bool:
        """
        Whether the set is due for a refresh.

        A set that was never checked is stale. Without a refresh interval a
        checked set never goes stale.
        """
        if self.last_checked_at is None:
            return True
        if not self.refresh_interval_seconds:
            return False
        now = now or datetime.now(UTC)
        return now - self.last_checked_at >= timedelta(seconds=self.refresh_interval_seconds)

    def describe(self) -> dict:
        """Summary used by health reporting."""
        return {
            "kind": self.kind.value,
            "count": len(self._records),
            "origin": self.origin.value,
            "loaded_at": self.loaded_at.isoformat() if self.loaded_at else None,
            "last_checked_at": self.last_checked_at.isoformat() if self.last_checked_at else None,
            "last_error": self.last_error.reason.value if self.last_error else None,
            "refreshing": self.in_flight is not None and not self.in_flight.done(),
        }


class ContentStore:
    """Maps each content kind to its held record set."""

    def __init__(self, held: Optional[Dict[ContentKind, HeldRecordSet]] = None):
        self._held: Dict[ContentKind, HeldRecordSet] = {
            kind: HeldRecordSet(kind) for kind in ContentKind
        }
        self._held.update(held or {})

    @classmethod
    def with_fallbacks(cls) -> "ContentStore":
        """Build a store seeded with the bundled fallback sets."""
        held = {kind: HeldRecordSet(kind, load_fallback_records(kind)) for kind in ContentKind}
        store = cls(held)
        logger.info(
            "Content store seeded: "
            + ", ".join(f"{kind.value}={len(h)}" for kind, h in store._held.items())
        )
        return store

    def __getitem__(self, kind: ContentKind | str) -> HeldRecordSet:
        return self._held[ContentKind(kind)]

    def records(self, kind: ContentKind | str) -> List[ContentRecord]:
        """Current records of a kind as a new list."""
        return list(self[kind].records)

    @property
    def events(self) -> list:
        return self.records(ContentKind.EVENTS)

    @property
    def articles(self) -> list:
        return self.records(ContentKind.ARTICLES)

    @property
    def partners(self) -> list:
        return self.records(ContentKind.PARTNERS)

    @property
    def neighborhoods(self) -> list:
        return self.records(ContentKind.NEIGHBORHOODS)

    def describe(self) -> List[dict]:
        return [held.describe() for held in self._held.values()]
