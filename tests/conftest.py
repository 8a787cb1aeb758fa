"""Pytest configuration and fixtures."""

import json
import sqlite3
from dataclasses import dataclass
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from storage_dashboard.config import settings
from storage_dashboard.keys import CHAT_DATA_KEY, COMPOSER_METADATA_KEY
from storage_dashboard.layout import StorageLayout
from storage_dashboard.main import app

WORKSPACE_TABLE = "ItemTable"
GLOBAL_TABLE = "cursorDiskKV"


def create_kv_db(path: Path, table: str, rows: list[tuple[str, object]]) -> Path:
    """Create a key-value SQLite database shaped like the editor's."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    try:
        conn.execute(
            f'CREATE TABLE IF NOT EXISTS "{table}" ("key" TEXT UNIQUE ON CONFLICT REPLACE, value BLOB)'
        )
        conn.executemany(f'INSERT INTO "{table}" ("key", value) VALUES (?, ?)', rows)
        conn.commit()
    finally:
        conn.close()
    return path


def write_corrupt_db(path: Path) -> Path:
    """Write a file that SQLite refuses to read."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"this is not a database file " * 64)
    return path


@dataclass
class EditorStorage:
    """Temporary editor storage tree: workspaceStorage + globalStorage."""

    root: Path
    global_dir: Path

    @property
    def layout(self) -> StorageLayout:
        return StorageLayout(workspace_root=self.root, global_storage_dir=self.global_dir)

    @property
    def global_db_path(self) -> Path:
        return self.global_dir / "state.vscdb"

    def add_workspace(
        self,
        workspace_id: str,
        *,
        chat: object = None,
        composer: object = None,
        folder: str | None = None,
        metadata: str | None = None,
        extra_rows: list[tuple[str, object]] | None = None,
    ) -> Path:
        """
        Create a workspace directory with a state database.

        chat/composer may be dicts (JSON-encoded) or raw strings.
        """
        workspace_dir = self.root / workspace_id
        workspace_dir.mkdir(parents=True, exist_ok=True)

        rows: list[tuple[str, object]] = []
        if chat is not None:
            rows.append((CHAT_DATA_KEY, chat if isinstance(chat, str) else json.dumps(chat)))
        if composer is not None:
            rows.append(
                (COMPOSER_METADATA_KEY, composer if isinstance(composer, str) else json.dumps(composer))
            )
        rows.extend(extra_rows or [])
        create_kv_db(workspace_dir / "state.vscdb", WORKSPACE_TABLE, rows)

        if metadata is not None:
            (workspace_dir / "workspace.json").write_text(metadata, encoding="utf-8")
        elif folder is not None:
            (workspace_dir / "workspace.json").write_text(
                json.dumps({"folder": folder}), encoding="utf-8"
            )
        return workspace_dir

    def add_global_rows(self, rows: list[tuple[str, object]]) -> Path:
        return create_kv_db(self.global_db_path, GLOBAL_TABLE, rows)


@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def editor_storage(tmp_path, monkeypatch) -> EditorStorage:
    """Create an empty editor storage tree and point settings at it."""
    user_dir = tmp_path / "User"
    root = user_dir / "workspaceStorage"
    global_dir = user_dir / "globalStorage"
    root.mkdir(parents=True)
    global_dir.mkdir(parents=True)

    monkeypatch.setattr(settings, "workspace_path", root)
    monkeypatch.setattr(settings, "global_storage_path", None)

    return EditorStorage(root=root, global_dir=global_dir)


@pytest.fixture
def unconfigured(monkeypatch):
    """Configure settings without a workspace path."""
    monkeypatch.setattr(settings, "workspace_path", None)
    monkeypatch.setattr(settings, "global_storage_path", None)
