"""
Normalization of sheet responses into typed records.

This package provides:
- Envelope handling: extract_payload, decode_payload, table_parts
- KindSchema: Declarative per-kind field schema
- SheetFieldMapper: Header normalization, coercion, aliasing and defaults
- parse / parse_or_none: The generic parser
"""

from .envelope import decode_payload, extract_payload, table_parts
from .field_mapper import (
    SheetFieldMapper,
    cell_value,
    coerce_boolean,
    coerce_integer,
    coerce_list,
    normalize_header,
)
from .kind_schema import KIND_SCHEMAS, ROW_INDEX, KindSchema, get_kind_schema
from .parser import ParseResult, parse, parse_or_none

__all__ = [
    "decode_payload",
    "extract_payload",
    "table_parts",
    "SheetFieldMapper",
    "cell_value",
    "coerce_boolean",
    "coerce_integer",
    "coerce_list",
    "normalize_header",
    "KIND_SCHEMAS",
    "ROW_INDEX",
    "KindSchema",
    "get_kind_schema",
    "ParseResult",
    "parse",
    "parse_or_none",
]
