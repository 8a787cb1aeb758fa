"""Health check endpoint."""

from pathlib import Path

import structlog
from fastapi import APIRouter

from storage_dashboard.config import settings
from storage_dashboard.errors import ConfigurationError, StorageUnavailableError
from storage_dashboard.layout import StorageLayout
from storage_dashboard.models.responses import ErrorResponse, HealthResponse

logger = structlog.get_logger()
router = APIRouter(tags=["backend"])


def _check_path_accessible(path: Path) -> bool:
    """Check if a directory exists and is accessible."""
    try:
        return path.exists() and path.is_dir()
    except OSError:
        return False


def _check_file_accessible(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": ErrorResponse}},
    summary="Health check",
    description="Check if the service is running and the workspace storage is accessible.",
)
async def health_check() -> HealthResponse:
    """
    Perform health check.

    Validates:
    - WORKSPACE_PATH is configured
    - The workspace storage directory is accessible
    The global database is reported but optional.
    """
    try:
        layout = StorageLayout.from_settings(settings)
    except ConfigurationError:
        logger.info("health_check", status="unconfigured")
        return HealthResponse(
            status="unconfigured",
            version=settings.api_version,
            storage_configured=False,
            details=None,
        )

    path_status = {
        "workspace_root": _check_path_accessible(layout.workspace_root),
        "global_db": _check_file_accessible(layout.global_db_path),
    }
    healthy = path_status["workspace_root"]

    logger.info(
        "health_check",
        status="healthy" if healthy else "unhealthy",
        path_status=path_status,
    )

    if not healthy:
        raise StorageUnavailableError(
            "Workspace storage directory is not accessible",
            details=path_status,
        )

    return HealthResponse(
        status="healthy",
        version=settings.api_version,
        storage_configured=True,
        details=path_status,
    )
