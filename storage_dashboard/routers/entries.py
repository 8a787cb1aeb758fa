"""Single entry viewer: look up one key in the global or a workspace database."""

import structlog
from fastapi import APIRouter, Depends, Query

from storage_dashboard.database import read_entry
from storage_dashboard.decoding import decode_value, message_preview
from storage_dashboard.dependencies import get_storage_layout
from storage_dashboard.errors import InvalidRequestError
from storage_dashboard.keys import KeyCategory, classify_key
from storage_dashboard.layout import GLOBAL_SOURCE, StorageLayout
from storage_dashboard.models.responses import EntryResponse, ErrorResponse
from storage_dashboard.sizes import format_size, utf8_size

logger = structlog.get_logger()
router = APIRouter(tags=["entries"])


@router.get(
    "/entry",
    response_model=EntryResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing key or invalid source"},
        404: {"model": ErrorResponse, "description": "Database or entry not found"},
        500: {"model": ErrorResponse, "description": "Database could not be read"},
    },
    summary="Get a stored entry",
    description="""
    Return one entry with its raw value, the JSON-decoded value (or the raw
    value when it is not JSON), its size and display category.

    `source=global` reads the global database; any other value is treated as
    a workspace id.
    """,
)
async def get_entry(
    key: str | None = Query(default=None, description="Exact storage key"),
    source: str = Query(default=GLOBAL_SOURCE, description="'global' or a workspace id"),
    layout: StorageLayout = Depends(get_storage_layout),
) -> EntryResponse:
    """Look up one entry by key."""
    if not key:
        raise InvalidRequestError("Key parameter is required")

    db_path, table = layout.resolve_source(source)
    row = await read_entry(db_path, table, key)

    raw_value = row.value
    parsed_value = decode_value(raw_value).value if raw_value is not None else None
    category = classify_key(row.key)
    size_bytes = utf8_size(raw_value)

    logger.info("entry_read", key=key, source=source, size_bytes=size_bytes)

    return EntryResponse(
        key=row.key,
        raw_value=raw_value,
        parsed_value=parsed_value,
        source=source,
        size_bytes=size_bytes,
        size_formatted=format_size(size_bytes),
        category=category.value,
        preview=message_preview(parsed_value) if category is KeyCategory.CHAT_MESSAGE else None,
    )
