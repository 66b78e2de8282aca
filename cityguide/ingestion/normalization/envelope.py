"""
Envelope handling for the tabular data source.

The source answers ``tqx=out:json`` queries with JSON wrapped in a
JS-function-call shaped envelope::

    /*O_o*/
    google.visualization.Query.setResponse({...});

The JSON must be cut out of the wrapper before it can be decoded.
"""

import json
import re
from typing import Any, Dict, List, Tuple

from cityguide.ingestion.errors import MalformedEnvelope, MalformedPayload

ENVELOPE_PATTERN = re.compile(
    r"google\.visualization\.Query\.setResponse\(([\s\S]*)\);?"
)


def extract_payload(response_text: str) -> str:
    """
    Return the JSON text inside the envelope.

    Raises:
        MalformedEnvelope: If the wrapper is not present
    """
    if not isinstance(response_text, str):
        raise MalformedEnvelope("Response body is not text")

    match = ENVELOPE_PATTERN.search(response_text)
    if not match or not match.group(1).strip():
        raise MalformedEnvelope("Invalid response format")
    return match.group(1)


def decode_payload(payload: str) -> Dict[str, Any]:
    """
    Decode the payload JSON.

    Raises:
        MalformedPayload: If the text is not a JSON object
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise MalformedPayload(f"Invalid JSON in envelope: {e.msg} at {e.pos}")

    if not isinstance(data, dict):
        raise MalformedPayload("Envelope JSON is not an object")
    return data


def table_parts(data: Dict[str, Any]) -> Tuple[List[Any], List[Any]]:
    """
    Return ``(cols, rows)`` from a decoded response.

    A missing ``rows`` array means an empty table; a missing ``table`` or
    ``cols`` is a structural failure.
    """
    if data.get("status") == "error":
        reasons = [
            e.get("detailed_message") or e.get("message") or e.get("reason", "")
            for e in data.get("errors") or []
            if isinstance(e, dict)
        ]
        raise MalformedPayload(f"Source reported an error: {'; '.join(reasons) or 'unknown'}")

    table = data.get("table")
    if not isinstance(table, dict):
        raise MalformedPayload("Response has no table")

    cols = table.get("cols")
    if not isinstance(cols, list):
        raise MalformedPayload("Table has no column list")

    rows = table.get("rows") or []
    if not isinstance(rows, list):
        raise MalformedPayload("Table rows are not a list")
    return cols, rows
