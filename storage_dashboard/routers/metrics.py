"""Prometheus metrics endpoint router.

Exposes /metrics endpoint for Prometheus scraping.
Also provides storage metrics collection.
"""

import sqlite3
from pathlib import Path

import structlog
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from storage_dashboard.config import settings
from storage_dashboard.errors import ConfigurationError
from storage_dashboard.layout import StorageLayout
from storage_dashboard.metrics import (
    STORAGE_SIZE_BYTES,
    WORKSPACES_TOTAL,
    set_service_info,
)

logger = structlog.get_logger()

router = APIRouter(tags=["metrics"])


def get_directory_size(path: Path) -> int:
    """Calculate total size of all files in a directory recursively."""
    total = 0
    if path.exists():
        for item in path.rglob("*"):
            if item.is_file():
                try:
                    total += item.stat().st_size
                except OSError:
                    pass
    return total


def collect_storage_metrics() -> None:
    """Collect current storage metrics from the filesystem."""
    try:
        layout = StorageLayout.from_settings(settings)
    except ConfigurationError:
        return

    try:
        root = layout.workspace_root
        workspace_count = 0
        if root.is_dir():
            for entry in root.iterdir():
                if entry.is_dir() and layout.workspace_db_path(entry.name).is_file():
                    workspace_count += 1
        WORKSPACES_TOTAL.set(workspace_count)

        STORAGE_SIZE_BYTES.labels(type="workspaces").set(get_directory_size(root))

        global_db = layout.global_db_path
        STORAGE_SIZE_BYTES.labels(type="global").set(
            global_db.stat().st_size if global_db.is_file() else 0
        )
    except OSError as e:
        logger.error("metrics_collection_failed", error=str(e))


@router.get(
    "/metrics",
    response_class=PlainTextResponse,
    summary="Prometheus metrics endpoint",
    description="Returns metrics in Prometheus text format for scraping.",
)
async def get_metrics():
    """
    Expose Prometheus metrics.

    Returns metrics in text/plain format using Prometheus exposition format.
    """
    set_service_info(version=settings.api_version, sqlite_version=sqlite3.sqlite_version)

    collect_storage_metrics()

    return PlainTextResponse(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )
