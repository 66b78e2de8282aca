"""
Generic sheet parser.

One parser serves every content kind. The differences between kinds live
in their KindSchema; the parse itself is:

1. Cut the JSON out of the response envelope
2. Resolve headers (promoting the first row when labels are missing)
3. Map each row through the SheetFieldMapper
4. Drop rows without the kind's required field
5. Validate into typed records and sort by ``order`` where the kind asks

A row that fails model validation is skipped with a warning. Structural
failures (envelope, JSON, table traversal) collapse to a single
ParseFailure; no partial record set is returned for those.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from pydantic import ValidationError

from cityguide.ingestion.errors import ContentLoadError, MalformedPayload, ParseFailure
from cityguide.ingestion.normalization.envelope import (
    decode_payload,
    extract_payload,
    table_parts,
)
from cityguide.ingestion.normalization.field_mapper import SheetFieldMapper
from cityguide.ingestion.normalization.kind_schema import KindSchema, get_kind_schema
from cityguide.schemas.content import RECORD_MODELS, ContentKind, ContentRecord

logger = logging.getLogger("cityguide.ingestion.parser")


@dataclass(frozen=True)
class ParseResult:
    """Outcome of one parse: either records or a failure, never both."""

    records: Optional[List[ContentRecord]] = None
    error: Optional[ParseFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_empty(self) -> bool:
        """Successful parse with zero qualifying records."""
        return self.ok and not self.records


def parse(
    kind: ContentKind | str,
    raw_text: str,
    schema: Optional[KindSchema] = None,
) -> ParseResult:
    """
    Parse a raw source response into typed records.

    Args:
        kind: Content kind being parsed
        raw_text: Verbatim response body, envelope included
        schema: Schema to use instead of the built-in one for the kind

    Returns:
        ParseResult with ``records`` on success or ``error`` on failure
    """
    kind = ContentKind(kind)
    schema = schema or get_kind_schema(kind)

    try:
        records = _parse_records(kind, raw_text, schema)
    except ContentLoadError as e:
        e.kind = e.kind or kind.value
        logger.debug(f"Parse failed: {e}")
        return ParseResult(error=ParseFailure.from_error(e))
    except Exception as e:
        logger.debug(f"[{kind.value}] Unexpected error while traversing rows: {e}")
        return ParseResult(error=ParseFailure.from_error(MalformedPayload(str(e), kind=kind.value)))

    return ParseResult(records=records)


def parse_or_none(kind: ContentKind | str, raw_text: str) -> Optional[List[ContentRecord]]:
    """Return the parsed records, or None if the parse failed."""
    return parse(kind, raw_text).records


def _parse_records(kind: ContentKind, raw_text: str, schema: KindSchema) -> List[ContentRecord]:
    data = decode_payload(extract_payload(raw_text))
    cols, rows = table_parts(data)

    mapper = SheetFieldMapper(schema)
    headers, rows = mapper.resolve_headers(cols, rows)
    logger.debug(f"[{kind.value}] headers: {headers}")

    mapped = [mapper.map_row(row, headers, index) for index, row in enumerate(rows)]
    kept = [record for record in mapped if mapper.has_required_field(record)]

    dropped = len(mapped) - len(kept)
    if dropped:
        logger.debug(f"[{kind.value}] dropped {dropped} row(s) without '{schema.required_field}'")

    model = RECORD_MODELS[kind]
    records = []
    for record in kept:
        try:
            records.append(model.model_validate(record))
        except ValidationError as e:
            logger.warning(f"[{kind.value}] skipping row {record.get('id')}: {e.error_count()} validation error(s)")

    if schema.sort_by_order:
        records.sort(key=lambda r: getattr(r, "order", 0))

    logger.debug(f"[{kind.value}] parsed {len(records)} of {len(rows)} row(s)")
    return records
