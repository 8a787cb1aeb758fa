"""On-disk layout of the editor's storage, resolved from settings.

    <workspace_root>/<workspace_id>/state.vscdb      per-workspace database
    <workspace_root>/<workspace_id>/workspace.json   optional metadata
    <global_storage>/state.vscdb                     global database
"""

from dataclasses import dataclass
from pathlib import Path

from storage_dashboard.config import Settings
from storage_dashboard.errors import ConfigurationError, InvalidRequestError

GLOBAL_SOURCE = "global"


def is_valid_workspace_id(workspace_id: str) -> bool:
    """A workspace id must name a single directory directly under the root."""
    if not workspace_id or workspace_id in (".", ".."):
        return False
    if "/" in workspace_id or "\\" in workspace_id or "\x00" in workspace_id:
        return False
    return Path(workspace_id).name == workspace_id


@dataclass(frozen=True)
class StorageLayout:
    """Paths and table names for one request."""

    workspace_root: Path
    global_storage_dir: Path
    state_db_filename: str = "state.vscdb"
    metadata_filename: str = "workspace.json"
    workspace_table: str = "ItemTable"
    global_table: str = "cursorDiskKV"

    @classmethod
    def from_settings(cls, settings: Settings) -> "StorageLayout":
        """Build the layout, raising ConfigurationError when the root is unset."""
        if settings.workspace_path is None or not str(settings.workspace_path).strip():
            raise ConfigurationError(
                "Workspace path not configured. Set WORKSPACE_PATH to the "
                "editor's workspace storage directory."
            )
        return cls(
            workspace_root=settings.workspace_path,
            global_storage_dir=settings.resolve_global_storage_path(),
            state_db_filename=settings.state_db_filename,
            metadata_filename=settings.workspace_metadata_filename,
            workspace_table=settings.workspace_table,
            global_table=settings.global_table,
        )

    @property
    def global_db_path(self) -> Path:
        return self.global_storage_dir / self.state_db_filename

    def workspace_dir(self, workspace_id: str) -> Path:
        return self.workspace_root / workspace_id

    def workspace_db_path(self, workspace_id: str) -> Path:
        return self.workspace_dir(workspace_id) / self.state_db_filename

    def workspace_metadata_path(self, workspace_id: str) -> Path:
        return self.workspace_dir(workspace_id) / self.metadata_filename

    def resolve_source(self, source: str) -> tuple[Path, str]:
        """
        Return (database path, table) for an entry source.

        ``global`` selects the global database; any other value is a
        workspace id.
        """
        if source == GLOBAL_SOURCE:
            return self.global_db_path, self.global_table
        if not is_valid_workspace_id(source):
            raise InvalidRequestError(
                f"Invalid source: {source!r}", details={"source": source}
            )
        return self.workspace_db_path(source), self.workspace_table
