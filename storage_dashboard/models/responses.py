"""Request and response models for API endpoints.

JSON bodies use camelCase names (``chatCount``, ``removedWorkspaces``);
Python attributes stay snake_case. Models validate from the dataclasses
returned by the analysis modules (``from_attributes``).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(ApiModel):
    """Standard error response."""

    error: str = Field(description="Error message")
    type: str = Field(description="Error type")
    details: dict | list | None = Field(default=None, description="Additional error details")


class HealthResponse(ApiModel):
    """Health check response."""

    status: str = Field(description="Service status: 'healthy' or 'unhealthy'")
    version: str = Field(description="API version")
    storage_configured: bool = Field(description="Whether WORKSPACE_PATH is set")
    details: dict[str, bool] | None = Field(
        default=None, description="Availability of the workspace root and global database"
    )


# ============================================
# Statistics models
# ============================================


class LargestEntryResponse(ApiModel):
    key: str = Field(description="Storage key")
    size_bytes: int = Field(description="UTF-8 size of the value in bytes")
    type: str = Field(description="Key type (prefix before ':')")


class GlobalStatsResponse(ApiModel):
    """Statistics of the global key-value database."""

    rows_read: int = Field(description="Rows read, including rows with NULL or empty values")
    total_entries: int = Field(description="Rows with a non-empty value")
    composer_entries: int = Field(description="composerData:* rows")
    other_entries: int = Field(description="All other rows with a value")
    total_size_bytes: int
    composer_size_bytes: int
    other_size_bytes: int
    count_by_type: dict[str, int] = Field(
        description="Row count per key type (types below the size threshold omitted)"
    )
    size_by_type: dict[str, int] = Field(description="Total bytes per key type")
    sample_keys_by_type: dict[str, list[str]] = Field(
        description="Up to three example keys per key type"
    )
    largest_entries: list[LargestEntryResponse] = Field(
        description="Largest entries, descending by size"
    )


class WorkspaceStatsResponse(ApiModel):
    """Chat/composer presence of one workspace."""

    id: str = Field(description="Workspace directory name")
    folder: str | None = Field(default=None, description="Project folder from workspace.json")
    has_chats: bool
    has_composers: bool
    chat_count: int
    composer_count: int
    chat_size_bytes: int
    composer_size_bytes: int
    total_size_bytes: int


class StatisticsResponse(ApiModel):
    """Aggregate statistics across all workspaces plus the global database."""

    total_workspaces: int
    workspaces_with_chats: int
    workspaces_with_composers: int
    workspaces_with_both: int
    workspaces_with_only_chats: int
    workspaces_with_only_composers: int
    workspaces_with_neither: int
    total_chats: int
    total_composers: int
    total_chat_size_bytes: int
    total_composer_size_bytes: int
    total_workspace_data_size_bytes: int
    average_chats_per_workspace: float
    average_composers_per_workspace: float
    average_workspace_data_size_bytes: float
    percentage_with_neither: float = Field(description="Share of workspaces with no data, in %")
    empty_workspace_ids: list[str] = Field(
        description="Workspaces with neither chats nor composers"
    )
    workspace_details: list[WorkspaceStatsResponse]
    global_database: GlobalStatsResponse


# ============================================
# Entry models
# ============================================


class EntryResponse(ApiModel):
    """A single stored entry."""

    key: str
    raw_value: str | None = Field(description="Value as stored")
    parsed_value: Any = Field(
        default=None, description="JSON-decoded value, or the raw value if it is not JSON"
    )
    source: str = Field(description="'global' or the workspace id")
    size_bytes: int
    size_formatted: str
    category: str = Field(description="Display category of the key")
    preview: dict[str, Any] | None = Field(
        default=None, description="Text/timestamp excerpt for chat messages"
    )


# ============================================
# Workspace removal models
# ============================================


class RemoveWorkspacesRequest(ApiModel):
    """Request to remove workspace directories."""

    workspace_ids: list[str] = Field(description="Workspace directory names to delete")


class RemoveWorkspaceError(ApiModel):
    id: str = Field(description="Workspace id")
    message: str = Field(description="Why the workspace was not removed")


class RemoveWorkspacesResponse(ApiModel):
    """Result of a workspace removal batch."""

    success: bool = True
    removed_workspaces: list[str]
    removed_count: int
    errors: list[RemoveWorkspaceError]
    message: str
