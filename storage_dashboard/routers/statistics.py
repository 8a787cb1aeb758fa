"""Statistics endpoint: workspace scan plus global database analysis."""

import structlog
from fastapi import APIRouter, Depends

from storage_dashboard.config import settings
from storage_dashboard.dependencies import get_storage_layout
from storage_dashboard.global_db import analyze_global_database
from storage_dashboard.layout import StorageLayout
from storage_dashboard.models.responses import ErrorResponse, StatisticsResponse
from storage_dashboard.workspace_scan import aggregate_statistics, scan_workspaces

logger = structlog.get_logger()
router = APIRouter(tags=["statistics"])


@router.get(
    "/statistics",
    response_model=StatisticsResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Workspace path not configured"},
        404: {"model": ErrorResponse, "description": "Workspace path does not exist"},
    },
    summary="Storage statistics",
    description="""
    Scan every workspace database for chat and composer data and analyze the
    global database.

    Everything is recomputed from disk on each call. Workspaces whose
    database cannot be read are left out; an unreadable global database
    yields empty global statistics.
    """,
)
async def get_statistics(
    layout: StorageLayout = Depends(get_storage_layout),
) -> StatisticsResponse:
    """Return aggregate workspace and global database statistics."""
    records = await scan_workspaces(layout)

    global_stats = await analyze_global_database(
        layout.global_db_path,
        layout.global_table,
        min_type_size_bytes=settings.min_type_size_bytes,
        largest_limit=settings.largest_entries_limit,
        sample_limit=settings.sample_keys_per_type,
        rank_composer_entries=settings.rank_composer_entries,
    )

    stats = aggregate_statistics(records, global_stats)
    logger.info(
        "statistics_computed",
        total_workspaces=stats.total_workspaces,
        workspaces_with_neither=stats.workspaces_with_neither,
        global_entries=global_stats.total_entries,
    )
    return StatisticsResponse.model_validate(stats)
