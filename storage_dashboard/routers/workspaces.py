"""Workspace removal endpoints.

Removing a workspace deletes its storage directory (database, metadata and
anything else inside) permanently. Batches are best-effort: each id is
reported either in ``removedWorkspaces`` or in ``errors``.
"""

import structlog
from fastapi import APIRouter, Depends

from storage_dashboard.dependencies import get_storage_layout
from storage_dashboard.layout import StorageLayout
from storage_dashboard.models.responses import (
    ErrorResponse,
    RemoveWorkspaceError,
    RemoveWorkspacesRequest,
    RemoveWorkspacesResponse,
)
from storage_dashboard.pruner import PruneResult, prune_workspaces
from storage_dashboard.workspace_scan import aggregate_statistics, scan_workspaces

logger = structlog.get_logger()
router = APIRouter(prefix="/workspaces", tags=["workspaces"])


def _prune_result_to_response(result: PruneResult) -> RemoveWorkspacesResponse:
    return RemoveWorkspacesResponse(
        success=True,
        removed_workspaces=result.removed_ids,
        removed_count=result.removed_count,
        errors=[RemoveWorkspaceError(id=e.id, message=e.message) for e in result.errors],
        message=f"Successfully removed {result.removed_count} workspace(s)",
    )


@router.delete(
    "",
    response_model=RemoveWorkspacesResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid body or workspace path not configured"},
    },
    summary="Remove workspaces",
    description="""
    Delete the storage directories of the given workspaces.

    **WARNING**: Deletion is irreversible. Ids that do not exist are reported
    in `errors` with `directory not found`; they do not stop the batch.
    """,
)
async def remove_workspaces(
    request: RemoveWorkspacesRequest,
    layout: StorageLayout = Depends(get_storage_layout),
) -> RemoveWorkspacesResponse:
    """Remove the requested workspace directories."""
    logger.info("remove_workspaces_requested", count=len(request.workspace_ids))
    result = await prune_workspaces(layout.workspace_root, request.workspace_ids)
    return _prune_result_to_response(result)


@router.delete(
    "/empty",
    response_model=RemoveWorkspacesResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Workspace path not configured"},
        404: {"model": ErrorResponse, "description": "Workspace path does not exist"},
    },
    summary="Remove empty workspaces",
    description="""
    Scan all workspaces and delete those with neither chat nor composer data.

    **WARNING**: Deletion is irreversible.
    """,
)
async def remove_empty_workspaces(
    layout: StorageLayout = Depends(get_storage_layout),
) -> RemoveWorkspacesResponse:
    """Remove every workspace without chats or composers."""
    stats = aggregate_statistics(await scan_workspaces(layout))
    logger.info("remove_empty_workspaces_requested", count=len(stats.empty_workspace_ids))
    result = await prune_workspaces(layout.workspace_root, stats.empty_workspace_ids)
    return _prune_result_to_response(result)
