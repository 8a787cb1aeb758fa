"""Removal of workspace directories.

Deletion is permanent and best-effort per workspace: one failing id is
recorded in ``errors`` and the remaining ids are still processed.
"""

import asyncio
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from storage_dashboard.errors import DeletionError
from storage_dashboard.layout import is_valid_workspace_id
from storage_dashboard.metrics import WORKSPACE_REMOVALS

logger = structlog.get_logger()

DIRECTORY_NOT_FOUND = "directory not found"
INVALID_WORKSPACE_ID = "invalid workspace id"


@dataclass
class PruneError:
    id: str
    message: str


@dataclass
class PruneResult:
    removed_ids: list[str] = field(default_factory=list)
    errors: list[PruneError] = field(default_factory=list)

    @property
    def removed_count(self) -> int:
        return len(self.removed_ids)


def _ignore_vanished(function, path, exc: BaseException) -> None:
    """rmtree error hook: entries removed concurrently are not failures."""
    if isinstance(exc, FileNotFoundError):
        return
    raise exc


def remove_directory(path: Path) -> None:
    """
    Recursively delete a directory, tolerating already-removed entries.

    A symlink is removed itself; its target is left untouched.
    """
    try:
        if path.is_symlink():
            path.unlink()
            return
        shutil.rmtree(path, onexc=_ignore_vanished)
    except FileNotFoundError:
        return
    except OSError as e:
        raise DeletionError(f"Failed to remove {path}: {e}", details={"path": str(path)}) from e


async def prune_workspaces(workspace_root: Path, workspace_ids: Iterable[str]) -> PruneResult:
    """Delete each workspace directory, collecting successes and failures."""
    result = PruneResult()

    for workspace_id in workspace_ids:
        if not is_valid_workspace_id(workspace_id):
            WORKSPACE_REMOVALS.labels(status="invalid").inc()
            result.errors.append(PruneError(id=workspace_id, message=INVALID_WORKSPACE_ID))
            logger.warning("workspace_id_invalid", workspace_id=workspace_id)
            continue

        workspace_dir = workspace_root / workspace_id
        if not workspace_dir.is_dir():
            WORKSPACE_REMOVALS.labels(status="not_found").inc()
            result.errors.append(PruneError(id=workspace_id, message=DIRECTORY_NOT_FOUND))
            logger.info("workspace_dir_not_found", workspace_id=workspace_id, path=str(workspace_dir))
            continue

        try:
            await asyncio.to_thread(remove_directory, workspace_dir)
        except DeletionError as e:
            WORKSPACE_REMOVALS.labels(status="failed").inc()
            result.errors.append(PruneError(id=workspace_id, message=e.message))
            logger.error("workspace_remove_failed", workspace_id=workspace_id, error=e.message)
            continue

        WORKSPACE_REMOVALS.labels(status="removed").inc()
        result.removed_ids.append(workspace_id)
        logger.info("workspace_dir_deleted", workspace_id=workspace_id, path=str(workspace_dir))

    logger.info(
        "workspaces_pruned",
        requested=result.removed_count + len(result.errors),
        removed=result.removed_count,
        failed=len(result.errors),
    )
    return result
