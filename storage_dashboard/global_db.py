"""Analysis of the global key-value database.

A single pass over the global table splits rows into per-composer data
(``composerData:*``) and everything else. The other rows are bucketed by
key type (the key prefix before ':'), sampled, and ranked by size.
Buckets whose total size stays below a threshold are dropped from the
report entirely.

The analysis is best-effort: a missing or unreadable database yields empty
statistics instead of an error.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from storage_dashboard.database import StorageRow, open_read_only
from storage_dashboard.errors import DatabaseNotFoundError, QueryError
from storage_dashboard.keys import is_composer_data, key_type
from storage_dashboard.metrics import GLOBAL_ANALYSIS_FAILURES
from storage_dashboard.sizes import MB, utf8_size

logger = structlog.get_logger()

MIN_TYPE_SIZE_BYTES = 0.1 * MB
LARGEST_ENTRIES_LIMIT = 10
SAMPLE_KEYS_LIMIT = 3


@dataclass
class LargestEntry:
    key: str
    size_bytes: int
    type: str


@dataclass
class GlobalStats:
    """Aggregate statistics of the global database."""

    rows_read: int = 0
    total_entries: int = 0
    composer_entries: int = 0
    other_entries: int = 0
    total_size_bytes: int = 0
    composer_size_bytes: int = 0
    other_size_bytes: int = 0
    count_by_type: dict[str, int] = field(default_factory=dict)
    size_by_type: dict[str, int] = field(default_factory=dict)
    sample_keys_by_type: dict[str, list[str]] = field(default_factory=dict)
    largest_entries: list[LargestEntry] = field(default_factory=list)


def summarize_rows(
    rows: Iterable[StorageRow],
    *,
    min_type_size_bytes: float = MIN_TYPE_SIZE_BYTES,
    largest_limit: int = LARGEST_ENTRIES_LIMIT,
    sample_limit: int = SAMPLE_KEYS_LIMIT,
    rank_composer_entries: bool = False,
) -> GlobalStats:
    """
    Compute GlobalStats from rows of the global table.

    Rows with a NULL or empty value count towards rows_read only. With
    rank_composer_entries, composer rows also compete for largest_entries;
    otherwise only non-composer rows are ranked.
    """
    stats = GlobalStats()
    candidates: list[tuple[str, int]] = []

    for row in rows:
        stats.rows_read += 1
        if not row.value:
            continue

        size_bytes = utf8_size(row.value)
        stats.total_entries += 1
        stats.total_size_bytes += size_bytes

        if is_composer_data(row.key):
            stats.composer_entries += 1
            stats.composer_size_bytes += size_bytes
            if rank_composer_entries:
                candidates.append((row.key, size_bytes))
            continue

        stats.other_entries += 1
        stats.other_size_bytes += size_bytes

        bucket = key_type(row.key)
        stats.count_by_type[bucket] = stats.count_by_type.get(bucket, 0) + 1
        stats.size_by_type[bucket] = stats.size_by_type.get(bucket, 0) + size_bytes
        samples = stats.sample_keys_by_type.setdefault(bucket, [])
        if len(samples) < sample_limit:
            samples.append(row.key)
        candidates.append((row.key, size_bytes))

    # Counts, sizes and samples are dropped together
    small_types = [t for t, size in stats.size_by_type.items() if size < min_type_size_bytes]
    for bucket in small_types:
        del stats.count_by_type[bucket]
        del stats.size_by_type[bucket]
        del stats.sample_keys_by_type[bucket]

    # sorted() is stable, so equal sizes keep scan order
    ranked = sorted(candidates, key=lambda c: c[1], reverse=True)[:largest_limit]
    stats.largest_entries = [
        LargestEntry(key=key, size_bytes=size, type=key_type(key)) for key, size in ranked
    ]
    return stats


async def analyze_global_database(
    db_path: Path,
    table: str,
    *,
    min_type_size_bytes: float = MIN_TYPE_SIZE_BYTES,
    largest_limit: int = LARGEST_ENTRIES_LIMIT,
    sample_limit: int = SAMPLE_KEYS_LIMIT,
    rank_composer_entries: bool = False,
) -> GlobalStats:
    """Read the global table and summarize it; empty stats if unavailable."""
    if not db_path.is_file():
        logger.info("global_db_not_found", path=str(db_path))
        return GlobalStats()

    try:
        async with open_read_only(db_path) as db:
            rows = await db.query_all(table)
    except (DatabaseNotFoundError, QueryError) as e:
        GLOBAL_ANALYSIS_FAILURES.inc()
        logger.warning("global_db_unreadable", path=str(db_path), error=e.message)
        return GlobalStats()

    stats = summarize_rows(
        rows,
        min_type_size_bytes=min_type_size_bytes,
        largest_limit=largest_limit,
        sample_limit=sample_limit,
        rank_composer_entries=rank_composer_entries,
    )
    logger.info(
        "global_db_analyzed",
        path=str(db_path),
        rows_read=stats.rows_read,
        total_entries=stats.total_entries,
        types_reported=len(stats.count_by_type),
    )
    return stats
