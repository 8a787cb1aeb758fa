"""Application configuration using pydantic-settings."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be configured via:
    1. Environment variables (e.g., WORKSPACE_PATH=/my/path)
    2. .env file in the project root

    WORKSPACE_PATH points at the editor's per-workspace storage directory
    (the directory holding one sub-directory per workspace). The global
    storage directory is its sibling unless overridden.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
    )

    # API settings
    api_title: str = "Editor Storage Dashboard API"
    api_version: str = "0.1.0"
    debug: bool = True  # Default to True for development

    # Server settings
    host: str = "127.0.0.1"
    port: int = 8000

    # Storage paths - unset workspace_path is reported per request, not at startup
    workspace_path: Path | None = None
    global_storage_path: Path | None = None

    # On-disk layout of the editor's storage
    state_db_filename: str = "state.vscdb"
    workspace_metadata_filename: str = "workspace.json"
    workspace_table: str = "ItemTable"
    global_table: str = "cursorDiskKV"

    # Global database analysis
    min_type_size_mb: float = 0.1
    largest_entries_limit: int = 10
    sample_keys_per_type: int = 3
    rank_composer_entries: bool = False

    @field_validator("workspace_path", "global_storage_path", mode="before")
    @classmethod
    def blank_path_is_unset(cls, value):
        """Treat an empty or whitespace-only path as not configured."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def resolve_global_storage_path(self) -> Path | None:
        """Return the global storage directory (sibling of workspace_path by default)."""
        if self.global_storage_path is not None:
            return self.global_storage_path
        if self.workspace_path is None:
            return None
        return self.workspace_path / ".." / "globalStorage"

    @property
    def min_type_size_bytes(self) -> float:
        """Minimum accumulated size for a key type to be reported."""
        return self.min_type_size_mb * 1024 * 1024


# Global settings instance
settings = Settings()
