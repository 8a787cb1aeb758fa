"""Per-workspace scanning and cross-workspace statistics.

Each workspace directory holding a state database yields one
WorkspaceRecord describing whether it has chat data and/or composer data.
A workspace whose database cannot be read is left out of the results
(and logged); it never aborts the scan of the others.
"""

import asyncio
import json
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from storage_dashboard.database import open_read_only
from storage_dashboard.decoding import count_list_field
from storage_dashboard.errors import (
    NotFoundError,
    ParseError,
    QueryError,
    WorkspaceRootNotFoundError,
)
from storage_dashboard.global_db import GlobalStats
from storage_dashboard.keys import CHAT_DATA_KEY, COMPOSER_METADATA_KEY
from storage_dashboard.layout import StorageLayout
from storage_dashboard.metrics import WORKSPACE_SCAN_FAILURES
from storage_dashboard.sizes import utf8_size

logger = structlog.get_logger()


@dataclass
class WorkspaceRecord:
    """Chat/composer presence of a single workspace."""

    id: str
    folder: str | None = None
    has_chats: bool = False
    has_composers: bool = False
    chat_count: int = 0
    composer_count: int = 0
    chat_size_bytes: int = 0
    composer_size_bytes: int = 0

    @property
    def total_size_bytes(self) -> int:
        return self.chat_size_bytes + self.composer_size_bytes

    @property
    def is_empty(self) -> bool:
        return not self.has_chats and not self.has_composers


@dataclass
class AggregateStats:
    """Cross-workspace totals plus the global database analysis."""

    total_workspaces: int = 0
    workspaces_with_chats: int = 0
    workspaces_with_composers: int = 0
    workspaces_with_both: int = 0
    workspaces_with_only_chats: int = 0
    workspaces_with_only_composers: int = 0
    workspaces_with_neither: int = 0
    total_chats: int = 0
    total_composers: int = 0
    total_chat_size_bytes: int = 0
    total_composer_size_bytes: int = 0
    total_workspace_data_size_bytes: int = 0
    average_chats_per_workspace: float = 0.0
    average_composers_per_workspace: float = 0.0
    average_workspace_data_size_bytes: float = 0.0
    percentage_with_neither: float = 0.0
    empty_workspace_ids: list[str] = field(default_factory=list)
    workspace_details: list[WorkspaceRecord] = field(default_factory=list)
    global_database: GlobalStats = field(default_factory=GlobalStats)


def read_workspace_folder(metadata_path: Path) -> str | None:
    """Return the ``folder`` declared in workspace metadata, or None."""
    try:
        data = json.loads(metadata_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.debug("workspace_metadata_missing", path=str(metadata_path))
        return None
    except (OSError, ValueError) as e:
        logger.info("workspace_metadata_unreadable", path=str(metadata_path), error=str(e))
        return None

    if not isinstance(data, dict):
        return None
    folder = data.get("folder")
    return folder if isinstance(folder, str) else None


async def read_workspace(layout: StorageLayout, workspace_id: str) -> WorkspaceRecord:
    """
    Build the record for one workspace.

    Raises:
        NotFoundError: the state database disappeared
        QueryError: the state database cannot be read
    """
    folder = await asyncio.to_thread(
        read_workspace_folder, layout.workspace_metadata_path(workspace_id)
    )
    record = WorkspaceRecord(id=workspace_id, folder=folder)

    async with open_read_only(layout.workspace_db_path(workspace_id)) as db:
        chat_row = await db.query_one(layout.workspace_table, CHAT_DATA_KEY)
        composer_row = await db.query_one(layout.workspace_table, COMPOSER_METADATA_KEY)

    if chat_row is not None and chat_row.value:
        record.has_chats = True
        record.chat_size_bytes = utf8_size(chat_row.value)
        record.chat_count = count_list_field(chat_row.value, "tabs", workspace_id=workspace_id)

    if composer_row is not None and composer_row.value:
        record.has_composers = True
        record.composer_size_bytes = utf8_size(composer_row.value)
        record.composer_count = count_list_field(
            composer_row.value, "allComposers", workspace_id=workspace_id
        )

    return record


def list_workspace_ids(layout: StorageLayout) -> list[str]:
    """
    Return the ids of directories under the root that hold a state database,
    in listing order. Other entries are skipped silently.
    """
    root = layout.workspace_root
    try:
        entries = list(root.iterdir())
    except FileNotFoundError as e:
        raise WorkspaceRootNotFoundError(
            f"Workspace directory not found: {root}", details={"path": str(root)}
        ) from e
    except NotADirectoryError as e:
        raise WorkspaceRootNotFoundError(
            f"Workspace path is not a directory: {root}", details={"path": str(root)}
        ) from e

    return [
        entry.name
        for entry in entries
        if entry.is_dir() and layout.workspace_db_path(entry.name).is_file()
    ]


async def scan_workspaces(layout: StorageLayout) -> list[WorkspaceRecord]:
    """Scan every workspace directory under the root, in listing order."""
    workspace_ids = await asyncio.to_thread(list_workspace_ids, layout)

    records: list[WorkspaceRecord] = []
    for workspace_id in workspace_ids:
        try:
            records.append(await read_workspace(layout, workspace_id))
        except (NotFoundError, QueryError, ParseError, OSError) as e:
            WORKSPACE_SCAN_FAILURES.inc()
            logger.warning(
                "workspace_scan_failed",
                workspace_id=workspace_id,
                error=str(e),
                error_type=type(e).__name__,
            )

    logger.info(
        "workspaces_scanned", root=str(layout.workspace_root), workspaces=len(records)
    )
    return records


def aggregate_statistics(
    records: list[WorkspaceRecord], global_stats: GlobalStats | None = None
) -> AggregateStats:
    """Reduce workspace records into totals, partitions and averages."""
    stats = AggregateStats(
        workspace_details=list(records),
        global_database=global_stats if global_stats is not None else GlobalStats(),
    )
    stats.total_workspaces = len(records)

    for record in records:
        if record.has_chats:
            stats.workspaces_with_chats += 1
        if record.has_composers:
            stats.workspaces_with_composers += 1

        if record.has_chats and record.has_composers:
            stats.workspaces_with_both += 1
        elif record.has_chats:
            stats.workspaces_with_only_chats += 1
        elif record.has_composers:
            stats.workspaces_with_only_composers += 1
        else:
            stats.workspaces_with_neither += 1
            stats.empty_workspace_ids.append(record.id)

        stats.total_chats += record.chat_count
        stats.total_composers += record.composer_count
        stats.total_chat_size_bytes += record.chat_size_bytes
        stats.total_composer_size_bytes += record.composer_size_bytes

    stats.total_workspace_data_size_bytes = (
        stats.total_chat_size_bytes + stats.total_composer_size_bytes
    )

    if stats.total_workspaces:
        n = stats.total_workspaces
        stats.average_chats_per_workspace = stats.total_chats / n
        stats.average_composers_per_workspace = stats.total_composers / n
        stats.average_workspace_data_size_bytes = stats.total_workspace_data_size_bytes / n
        stats.percentage_with_neither = round(stats.workspaces_with_neither * 100.0 / n, 1)

    return stats
