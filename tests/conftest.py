"""
Shared pytest fixtures for the city guide test suite.

Provides factories for sheet responses and content records, plus the
bundled fallback sets.
"""

import json
from datetime import datetime
from typing import Any, List, Optional, Sequence

import pytest

from cityguide.configs.settings import Settings
from cityguide.ingestion.fallback import load_fallback_records
from cityguide.schemas.content import Article, ContentKind, Event


def build_sheet_response(
    labels: Sequence[Optional[str]],
    rows: Sequence[Sequence[Any]],
    formatted: bool = False,
) -> str:
    """
    Build a sheet query response body, envelope included.

    ``None`` values become null cells. With ``formatted`` the values are
    put in ``f`` instead of ``v``.
    """
    key = "f" if formatted else "v"
    table = {
        "cols": [
            {"id": chr(65 + i), "label": label or "", "type": "string"}
            for i, label in enumerate(labels)
        ],
        "rows": [
            {"c": [None if value is None else {key: value} for value in row]}
            for row in rows
        ],
    }
    payload = {"version": "0.6", "reqId": "0", "status": "ok", "sig": "1", "table": table}
    return "/*O_o*/\ngoogle.visualization.Query.setResponse(" + json.dumps(payload) + ");"


@pytest.fixture
def sheet_response():
    """Return the sheet response builder."""
    return build_sheet_response


@pytest.fixture
def create_event():
    """
    Return a function that creates Event objects with sensible defaults.

    Example:
        event = create_event(title="Trivia", featured=True)
    """
    counter = {"n": 0}

    def _create_event(
        title: str = "Test Event",
        start_datetime: Optional[datetime] = datetime(2026, 1, 21, 19, 0),
        **kwargs,
    ) -> Event:
        counter["n"] += 1
        defaults = {
            "id": str(counter["n"]),
            "title": title,
            "startDateTime": start_datetime,
            "venueName": "Test Venue",
            "neighborhood": "Downtown",
            "category": "Arts",
        }
        defaults.update(kwargs)
        return Event(**defaults)

    return _create_event


@pytest.fixture
def create_article():
    """Return a function that creates Article objects with sensible defaults."""
    counter = {"n": 0}

    def _create_article(title: str = "Test Article", **kwargs) -> Article:
        counter["n"] += 1
        defaults = {
            "id": f"article-{counter['n']}",
            "title": title,
            "slug": f"test-article-{counter['n']}",
        }
        defaults.update(kwargs)
        return Article(**defaults)

    return _create_article


@pytest.fixture(scope="session")
def fallback_events() -> List[Event]:
    return load_fallback_records(ContentKind.EVENTS)


@pytest.fixture(scope="session")
def fallback_articles() -> List[Article]:
    return load_fallback_records(ContentKind.ARTICLES)


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        MASTER_SHEET_ID="sheet-123",
        REFRESH_ON_STARTUP=False,
        LOG_LEVEL="DEBUG",
    )
