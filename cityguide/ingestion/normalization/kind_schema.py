"""
Declarative per-kind sheet schemas.

One generic parser handles every content kind; everything that differs
between kinds lives here: which header identifies a usable row, which
headers are coerced to booleans, lists or integers, how headers are renamed
to canonical field names, and which defaults fill missing fields.

Header keys (``boolean_fields``, ``list_fields``, ``numeric_fields``,
``aliases``) use the normalized sheet header (lower-cased, whitespace
removed). Everything else uses canonical field names.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Optional, Tuple

from cityguide.schemas.content import ContentKind

# Default marker meaning "use the row's position"
ROW_INDEX = "__row_index__"


@dataclass(frozen=True)
class KindSchema:
    """Field schema for one content kind."""

    kind: ContentKind
    required_field: str
    id_prefix: str
    boolean_fields: FrozenSet[str] = frozenset()
    list_fields: FrozenSet[str] = frozenset()
    numeric_fields: Mapping[str, Any] = field(default_factory=dict)
    aliases: Mapping[str, str] = field(default_factory=dict)
    apply_aliases: bool = True
    # canonical field -> value used when the field is missing or blank
    defaults: Mapping[str, Any] = field(default_factory=dict)
    # canonical field -> source field whose single value is wrapped in a list
    wrap_fields: Mapping[str, str] = field(default_factory=dict)
    # canonical field -> (source field, value) that switches the flag on
    flag_rules: Mapping[str, Tuple[str, Any]] = field(default_factory=dict)
    # canonical field -> ordered candidate fields, first non-blank wins
    fallback_fields: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    sort_by_order: bool = False

    def canonical_name(self, header: str) -> str:
        """Map a normalized header to its canonical field name."""
        if not self.apply_aliases:
            return header
        return self.aliases.get(header, header)

    def with_overrides(self, overrides: Optional[Dict[str, Any]]) -> "KindSchema":
        """
        Return a copy with config overrides applied.

        Mapping-valued options are merged onto the built-in values; set-valued
        options are unioned; scalars replace.
        """
        if not overrides:
            return self

        changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            if not hasattr(self, key) or key == "kind":
                raise ValueError(f"Unknown schema option for {self.kind.value}: {key}")

            current = getattr(self, key)
            if isinstance(current, frozenset):
                changes[key] = current | frozenset(value or [])
            elif isinstance(current, Mapping):
                merged = dict(current)
                merged.update(
                    {k: tuple(v) if isinstance(v, list) else v for k, v in (value or {}).items()}
                )
                changes[key] = merged
            else:
                changes[key] = value
        return replace(self, **changes)


EVENTS_SCHEMA = KindSchema(
    kind=ContentKind.EVENTS,
    required_field="title",
    id_prefix="sheet-event-",
    boolean_fields=frozenset({"allday", "featured"}),
    list_fields=frozenset({"tags"}),
    aliases={
        "allday": "allDay",
        "venuename": "venueName",
        "startdatetime": "startDateTime",
        "enddatetime": "endDateTime",
        "costtype": "costType",
        "costdetails": "costDetails",
        "shortdescription": "shortDescription",
    },
    defaults={
        "tags": [],
        "allDay": False,
        "featured": False,
    },
)

ARTICLES_SCHEMA = KindSchema(
    kind=ContentKind.ARTICLES,
    required_field="title",
    id_prefix="sheet-article-",
    boolean_fields=frozenset({"featured", "ispillar"}),
    list_fields=frozenset({"tags", "topiccategories"}),
    numeric_fields={"readtime": 10, "readtimeminutes": 10},
    aliases={
        "topiccategories": "topicCategories",
        "readtime": "readTimeMinutes",
        "readtimeminutes": "readTimeMinutes",
        "ispillar": "isPillar",
        "metatitle": "metaTitle",
        "metadescription": "metaDescription",
        "lastupdated": "lastUpdated",
        "parentslug": "parentSlug",
        "shortdescription": "shortDescription",
        "heroimage": "heroImage",
    },
    wrap_fields={"topicCategories": "category"},
    flag_rules={"isPillar": ("type", "pillar")},
    fallback_fields={"excerpt": ("excerpt", "shortDescription")},
    defaults={
        "tags": [],
        "topicCategories": [],
        "featured": False,
        "isPillar": False,
        "readTimeMinutes": 10,
        "type": "guide",
        "icon": "\U0001F4C4",
        "color": "#2C5235",
        "excerpt": "",
        "thumbnail": "",
        "heroImage": "",
    },
)

PARTNERS_SCHEMA = KindSchema(
    kind=ContentKind.PARTNERS,
    required_field="name",
    id_prefix="partner-",
    numeric_fields={"order": ROW_INDEX},
    aliases={"logourl": "logoUrl"},
    defaults={"order": ROW_INDEX},
    sort_by_order=True,
)

NEIGHBORHOODS_SCHEMA = KindSchema(
    kind=ContentKind.NEIGHBORHOODS,
    required_field="name",
    id_prefix="neighborhood-",
    numeric_fields={"order": ROW_INDEX},
    apply_aliases=False,
    defaults={"order": ROW_INDEX},
    sort_by_order=True,
)

KIND_SCHEMAS: Dict[ContentKind, KindSchema] = {
    ContentKind.EVENTS: EVENTS_SCHEMA,
    ContentKind.ARTICLES: ARTICLES_SCHEMA,
    ContentKind.PARTNERS: PARTNERS_SCHEMA,
    ContentKind.NEIGHBORHOODS: NEIGHBORHOODS_SCHEMA,
}


def get_kind_schema(kind: ContentKind | str) -> KindSchema:
    """Look up the built-in schema for a kind."""
    return KIND_SCHEMAS[ContentKind(kind)]
