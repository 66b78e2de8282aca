# cityguide/schemas/content.py
"""
Content record schemas for the city guide.

Four loosely-schematized record kinds are sourced from spreadsheet tabs:
events, articles, partners and neighborhoods. None of them reference each
other through enforced keys; ``parent_slug`` and ``neighborhood`` are plain
strings matched at query time.

Attributes are snake_case; every field carries the camelCase alias used by
the sheet columns and by the JSON surface, so ``model_dump(by_alias=True)``
reproduces the canonical record shape. Unknown columns are kept verbatim.
"""

import logging
import re
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

logger = logging.getLogger(__name__)


# ============================================================================
# ENUMS
# ============================================================================


class ContentKind(str, Enum):
    """Content categories, each backed by its own sheet tab."""

    EVENTS = "events"
    ARTICLES = "articles"
    PARTNERS = "partners"
    NEIGHBORHOODS = "neighborhoods"


ALL_FILTER = "All"


class EventCategory(str, Enum):
    """
    Event category vocabulary offered by the calendar filters.

    Records are not validated against it: ``Event.category`` stays a free
    string so a new category in the sheet never breaks ingestion.
    """

    FOOD_AND_DRINK = "Food & Drink"
    LIVE_MUSIC = "Live Music"
    ARTS = "Arts"
    SPORTS = "Sports"
    COMEDY = "Comedy"
    FAMILY = "Family"
    NIGHTLIFE = "Nightlife"
    OUTDOORS = "Outdoors"
    FITNESS = "Fitness"
    SHOPPING = "Shopping"

    @classmethod
    def filter_options(cls) -> List[str]:
        """Return the category filter options, sentinel first."""
        return [ALL_FILTER] + [c.value for c in cls]


class ArticleType(str, Enum):
    """Explore article types."""

    PILLAR = "pillar"
    GUIDE = "guide"
    LIST = "list"
    NEIGHBORHOOD = "neighborhood"

    @classmethod
    def filter_options(cls) -> List[str]:
        """Return the type filter options as displayed, sentinel first."""
        return [ALL_FILTER] + [t.value.capitalize() for t in cls]


class CostType(str, Enum):
    """Event cost classification (informational only)."""

    FREE = "free"
    PAID = "paid"


# ============================================================================
# DATE PARSING
# ============================================================================

# Typed date literal emitted by the tabular source, month is zero-based
_DATE_LITERAL = re.compile(r"^Date\((\d+),(\d+),(\d+)(?:,(\d+))?(?:,(\d+))?(?:,(\d+))?\)$")

_DATETIME_FORMATS = (
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)


def parse_local_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a sheet date-time value into a naive local datetime.

    Returns None for empty or unrecognized input. Offsets and a trailing
    ``Z`` are dropped so the wall-clock time is kept as written.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return value.replace(tzinfo=None)

    text = str(value).strip()
    if not text:
        return None

    match = _DATE_LITERAL.match(text.replace(" ", ""))
    if match:
        parts = [int(p) if p is not None else 0 for p in match.groups()]
        year, month, day, hour, minute, second = parts
        try:
            return datetime(year, month + 1, day, hour, minute, second)
        except ValueError:
            return None

    iso = text[:-1] if text.endswith("Z") else text
    try:
        return datetime.fromisoformat(iso).replace(tzinfo=None)
    except ValueError:
        pass

    for fmt in _DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    logger.debug(f"Could not parse datetime: {value!r}")
    return None


# ============================================================================
# RECORDS
# ============================================================================

_TEXT_TYPES = (str, Optional[str])


class ContentRecord(BaseModel):
    """Common base for all content records."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        coerce_numbers_to_str=True,
    )

    id: str

    @field_validator("*", mode="before")
    @classmethod
    def checkbox_to_text(cls, v: Any, info: ValidationInfo) -> Any:
        """Typed checkbox cells in text columns are kept as their text."""
        if isinstance(v, bool) and cls.model_fields[info.field_name].annotation in _TEXT_TYPES:
            return str(v).lower()
        return v

    def to_public(self) -> dict:
        """Serialize using the canonical camelCase field names."""
        return self.model_dump(by_alias=True, mode="json")


class Event(ContentRecord):
    """A calendar event."""

    title: str
    slug: str = ""
    start_datetime: Optional[datetime] = Field(default=None, alias="startDateTime")
    end_datetime: Optional[datetime] = Field(default=None, alias="endDateTime")
    all_day: bool = Field(default=False, alias="allDay")
    venue_name: str = Field(default="", alias="venueName")
    neighborhood: str = ""
    category: str = ""
    tags: List[str] = Field(default_factory=list)
    cost_type: str = Field(default="", alias="costType")
    cost_details: str = Field(default="", alias="costDetails")
    short_description: str = Field(default="", alias="shortDescription")
    featured: bool = False

    @field_validator("start_datetime", "end_datetime", mode="before")
    @classmethod
    def parse_datetime(cls, v: Any) -> Optional[datetime]:
        """Accept sheet date strings; unparseable values become None."""
        return parse_local_datetime(v)

    @property
    def has_valid_start(self) -> bool:
        """Whether the start date-time could be parsed."""
        return self.start_datetime is not None


class Article(ContentRecord):
    """An explore-section article (pillar page, guide, list, neighborhood)."""

    title: str
    slug: str = ""
    type: str = ArticleType.GUIDE.value
    topic_categories: List[str] = Field(default_factory=list, alias="topicCategories")
    tags: List[str] = Field(default_factory=list)
    featured: bool = False
    is_pillar: bool = Field(default=False, alias="isPillar")
    read_time_minutes: int = Field(default=10, alias="readTimeMinutes")
    icon: str = "\U0001F4C4"
    color: str = "#2C5235"
    excerpt: str = ""
    body: str = ""
    parent_slug: Optional[str] = Field(default=None, alias="parentSlug")
    neighborhood: Optional[str] = None
    thumbnail: str = ""
    hero_image: str = Field(default="", alias="heroImage")
    meta_title: Optional[str] = Field(default=None, alias="metaTitle")
    meta_description: Optional[str] = Field(default=None, alias="metaDescription")
    last_updated: Optional[str] = Field(default=None, alias="lastUpdated")

    @field_validator("parent_slug", "neighborhood", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Empty sheet cells mean the relation is absent."""
        if v == "":
            return None
        return v


class Partner(ContentRecord):
    """An advertiser/partner shown on the partner page."""

    name: str
    logo_url: str = Field(default="", alias="logoUrl")
    website: str = ""
    order: int = 0

    @property
    def has_logo(self) -> bool:
        """Placeholder tiles are rendered for partners without a logo."""
        return bool(self.logo_url)


class Neighborhood(ContentRecord):
    """A neighborhood card; other sheet columns pass through verbatim."""

    name: str
    order: int = 0


RECORD_MODELS = {
    ContentKind.EVENTS: Event,
    ContentKind.ARTICLES: Article,
    ContentKind.PARTNERS: Partner,
    ContentKind.NEIGHBORHOODS: Neighborhood,
}
