"""
Sheet Field Mapper for turning table rows into record dicts.

Maps raw sheet cells to canonical record fields using a KindSchema.
Supports:
- Header normalization: "Venue Name" -> "venuename"
- Cell value selection: typed value, then formatted value, then ""
- Coercions: boolean, comma-list, lenient integer
- Alias renaming: "venuename" -> "venueName"
- Per-kind defaults, derived fields and id fallbacks
"""

import logging
import re
from typing import Any, Dict, List, Optional

from cityguide.ingestion.normalization.kind_schema import ROW_INDEX, KindSchema

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


# ============================================================================
# COERCIONS
# ============================================================================


def normalize_header(label: Any) -> str:
    """Lower-case a column label and strip all whitespace."""
    if label is None:
        return ""
    return _WHITESPACE.sub("", str(label).lower())


def cell_value(cell: Any) -> Any:
    """
    Pick the value of a table cell.

    The typed value ``v`` wins, then the formatted value ``f``, then "".
    Integral floats are narrowed to int so numeric ids read as "1", not "1.0".
    """
    if not isinstance(cell, dict):
        return ""

    value = cell.get("v")
    if value is None:
        value = cell.get("f")
    if value is None:
        return ""

    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def header_cell_value(cell: Any) -> Any:
    """Pick a cell value for header promotion, treating falsy ``v`` as absent."""
    if not isinstance(cell, dict):
        return ""
    return cell.get("v") or cell.get("f") or ""


def coerce_boolean(value: Any) -> bool:
    """Only a case-insensitive "true" is true."""
    if isinstance(value, bool):
        return value
    return str(value).lower() == "true"


def coerce_list(value: Any) -> List[str]:
    """Split a comma-separated string, trimming entries and dropping empties."""
    if isinstance(value, list):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    # Wrap singletons
    return [str(value)]


def coerce_integer(value: Any, default: int) -> int:
    """
    Parse the leading integer of a value.

    Anything that does not start with an integer, and a parsed zero, yields
    the default.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        parsed = int(value)
    else:
        match = _LEADING_INT.match(str(value))
        if not match:
            return default
        parsed = int(match.group(1))
    return parsed or default


def _is_blank(value: Any) -> bool:
    """Missing-or-empty test used for defaulting; an empty list counts as set."""
    if isinstance(value, list):
        return False
    return not value


# ============================================================================
# MAPPER
# ============================================================================


class SheetFieldMapper:
    """
    Maps sheet rows to record dicts using a KindSchema.

    The mapper is stateless apart from its schema and can be reused across
    parses.
    """

    def __init__(self, schema: KindSchema):
        """
        Initialize the field mapper.

        Args:
            schema: Field schema of the content kind being mapped
        """
        self.schema = schema

    def resolve_headers(self, cols: List[Any], rows: List[Any]) -> tuple:
        """
        Derive headers from column labels.

        When the source supplied no labels at all, the first data row is
        promoted to the header row and removed from the data rows.

        Returns:
            Tuple of (headers, data_rows)
        """
        headers = [
            normalize_header(col.get("label") if isinstance(col, dict) else None)
            for col in cols
        ]

        if not any(headers) and rows:
            first = rows[0] if isinstance(rows[0], dict) else {}
            headers = [normalize_header(header_cell_value(c)) for c in first.get("c") or []]
            rows = rows[1:]
            logger.debug(f"{self.schema.kind.value}: promoted first row to headers")

        return headers, rows

    def map_row(self, row: Any, headers: List[str], index: int) -> Dict[str, Any]:
        """
        Build a record dict from one row.

        Args:
            row: Raw row object with a ``c`` list of cells
            headers: Normalized headers, positionally aligned with cells
            index: Position of the row among the data rows

        Returns:
            Dict keyed by canonical field names, defaults applied
        """
        record: Dict[str, Any] = {}
        cells = (row.get("c") if isinstance(row, dict) else None) or []

        for i, cell in enumerate(cells):
            header = headers[i] if i < len(headers) else ""
            if not header:
                continue

            value = self.coerce(header, cell_value(cell), index)
            record[self.schema.canonical_name(header)] = value

        return self.apply_defaults(record, index)

    def coerce(self, header: str, value: Any, index: int) -> Any:
        """Apply the schema's type coercion for a header."""
        if header in self.schema.boolean_fields:
            return coerce_boolean(value)
        if header in self.schema.list_fields:
            return coerce_list(value)
        if header in self.schema.numeric_fields:
            return coerce_integer(value, self._resolve_default(self.schema.numeric_fields[header], index))
        return value

    def apply_defaults(self, record: Dict[str, Any], index: int) -> Dict[str, Any]:
        """
        Fill identity, derived and default fields.

        Order: id fallback, list wrapping, flag rules, fallback chains, then
        static defaults for whatever is still blank.
        """
        schema = self.schema
        result = dict(record)

        if _is_blank(result.get("id")):
            result["id"] = f"{schema.id_prefix}{index}"

        for target, source in schema.wrap_fields.items():
            if target not in result or result[target] is None or result[target] == "":
                source_value = result.get(source)
                result[target] = [str(source_value)] if not _is_blank(source_value) else []

        for target, (source, expected) in schema.flag_rules.items():
            result[target] = bool(result.get(target)) or result.get(source) == expected

        for target, candidates in schema.fallback_fields.items():
            chosen: Optional[Any] = None
            for candidate in candidates:
                if not _is_blank(result.get(candidate)):
                    chosen = result[candidate]
                    break
            if chosen is not None:
                result[target] = chosen

        for target, default in schema.defaults.items():
            current = result.get(target)
            # An explicit False stays False
            if target not in result or (_is_blank(current) and not isinstance(current, bool)):
                result[target] = self._resolve_default(default, index)

        return result

    def has_required_field(self, record: Dict[str, Any]) -> bool:
        """Whether the record carries its kind's identifying field."""
        value = record.get(self.schema.required_field)
        if isinstance(value, str):
            return bool(value.strip())
        return not _is_blank(value)

    @staticmethod
    def _resolve_default(default: Any, index: int) -> Any:
        if default == ROW_INDEX:
            return index
        if isinstance(default, list):
            return list(default)
        return default
