"""Read-only access to the editor's SQLite key-value databases.

Both the per-workspace and the global databases hold a single two-column
table (``key``, ``value``). Connections are opened in read-only URI mode so
the dashboard can never modify editor state, and are always closed before
returning, including on errors.
"""

import sqlite3
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from storage_dashboard.errors import DatabaseNotFoundError, EntryNotFoundError, QueryError
from storage_dashboard.metrics import QUERY_COUNT, QUERY_DURATION

logger = structlog.get_logger()


@dataclass(frozen=True)
class StorageRow:
    """One row of a key-value table."""

    key: str
    value: str | None


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _to_text(value: Any) -> str | None:
    """Normalize a stored value to text; BLOBs are decoded as UTF-8."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


class StorageDatabase:
    """Handle to an open read-only database."""

    def __init__(self, conn: aiosqlite.Connection, path: Path) -> None:
        self._conn = conn
        self.path = path

    async def _fetch(self, operation: str, sql: str, params: tuple = ()) -> list[tuple]:
        start_time = time.perf_counter()
        status = "success"
        try:
            async with self._conn.execute(sql, params) as cursor:
                return list(await cursor.fetchall())
        except sqlite3.Error as e:
            status = "error"
            logger.warning(
                "sqlite_query_failed",
                operation=operation,
                path=str(self.path),
                error=str(e),
            )
            raise QueryError(
                f"Failed to query {self.path.name}: {e}",
                details={"path": str(self.path)},
            ) from e
        finally:
            QUERY_COUNT.labels(operation=operation, status=status).inc()
            QUERY_DURATION.labels(operation=operation).observe(time.perf_counter() - start_time)

    async def query_all(self, table: str) -> list[StorageRow]:
        """Return every row of a key-value table, in table order."""
        rows = await self._fetch(
            "query_all",
            f'SELECT "key", value FROM {_quote_identifier(table)}',
        )
        return [StorageRow(key=_to_text(key) or "", value=_to_text(value)) for key, value in rows]

    async def query_one(self, table: str, key: str) -> StorageRow | None:
        """Return the row for an exact key, or None."""
        rows = await self._fetch(
            "query_one",
            f'SELECT "key", value FROM {_quote_identifier(table)} WHERE "key" = ? LIMIT 1',
            (key,),
        )
        if not rows:
            return None
        row_key, value = rows[0]
        return StorageRow(key=_to_text(row_key) or "", value=_to_text(value))


@asynccontextmanager
async def open_read_only(path: Path) -> AsyncIterator[StorageDatabase]:
    """
    Open a database file read-only.

    Usage:
        async with open_read_only(db_path) as db:
            rows = await db.query_all("ItemTable")

    Raises:
        DatabaseNotFoundError: the file does not exist
        QueryError: SQLite cannot open the file
    """
    if not path.is_file():
        raise DatabaseNotFoundError(
            f"Database not found: {path}", details={"path": str(path)}
        )

    uri = f"{path.resolve().as_uri()}?mode=ro"
    try:
        conn = await aiosqlite.connect(uri, uri=True)
    except sqlite3.Error as e:
        logger.warning("sqlite_open_failed", path=str(path), error=str(e))
        raise QueryError(f"Failed to open {path.name}: {e}", details={"path": str(path)}) from e

    try:
        yield StorageDatabase(conn, path)
    finally:
        await conn.close()


async def read_entry(path: Path, table: str, key: str) -> StorageRow:
    """Look up a single entry, raising EntryNotFoundError when absent."""
    async with open_read_only(path) as db:
        row = await db.query_one(table, key)

    if row is None:
        raise EntryNotFoundError(
            f"Entry not found: {key}", details={"key": key, "path": str(path)}
        )
    return row
