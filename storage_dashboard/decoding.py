"""Decoding of stored values.

Stored values are opaque strings, usually JSON. Only a couple of shapes are
known (chat data with ``tabs``, composer data with ``allComposers``); those
are decoded defensively and fall back to zero instead of raising.
"""

import json
from typing import Any, NamedTuple

import structlog

from storage_dashboard.errors import ParseError

logger = structlog.get_logger()

PREVIEW_TEXT_LENGTH = 200


class DecodedValue(NamedTuple):
    """Result of decoding a stored value: JSON value, or the raw string."""

    parsed: bool
    value: Any


def parse_json(raw: str) -> Any:
    """Parse JSON text, raising ParseError on malformed input."""
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Invalid JSON: {e}") from e


def decode_value(raw: str) -> DecodedValue:
    """Decode a stored value, keeping the raw string when it is not JSON."""
    try:
        return DecodedValue(parsed=True, value=parse_json(raw))
    except ParseError:
        return DecodedValue(parsed=False, value=raw)


def count_list_field(raw: str, field: str, **log_context: Any) -> int:
    """
    Count the items of a list-valued top-level field in a JSON object.

    Returns 0 when the value is not JSON, not an object, or the field is
    missing or not a list.
    """
    try:
        data = parse_json(raw)
    except ParseError as e:
        logger.warning("stored_value_parse_failed", field=field, error=e.message, **log_context)
        return 0

    if not isinstance(data, dict):
        return 0
    items = data.get(field)
    return len(items) if isinstance(items, list) else 0


def message_preview(value: Any) -> dict[str, Any] | None:
    """Extract text and timestamp from a decoded chat message, if present."""
    if not isinstance(value, dict):
        return None

    text = value.get("text")
    timestamp = value.get("timestamp")
    if not text and not timestamp:
        return None

    preview: dict[str, Any] = {"text": None, "timestamp": timestamp}
    if isinstance(text, str) and text:
        preview["text"] = text[:PREVIEW_TEXT_LENGTH]
        if len(text) > PREVIEW_TEXT_LENGTH:
            preview["text"] += "..."
    return preview
