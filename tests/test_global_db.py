"""Tests for the global database analysis."""

import pytest

from storage_dashboard.database import StorageRow
from storage_dashboard.global_db import GlobalStats, analyze_global_database, summarize_rows
from tests.conftest import GLOBAL_TABLE, create_kv_db, write_corrupt_db

EXAMPLE_ROWS = [
    ("composerData:1", "x" * 50_000),
    ("foo:1", "y" * 200_000),
    ("foo:2", "z" * 50_000),
    ("bar:1", "w" * 1_000),
]


def _rows(pairs):
    return [StorageRow(key=k, value=v) for k, v in pairs]


class TestSummarizeRows:
    """Tests for the single-pass aggregation."""

    def test_composer_and_other_split(self):
        stats = summarize_rows(_rows(EXAMPLE_ROWS))

        assert stats.composer_entries == 1
        assert stats.other_entries == 3
        assert stats.total_entries == 4
        assert stats.composer_size_bytes == 50_000
        assert stats.other_size_bytes == 251_000
        assert stats.total_size_bytes == 301_000

    def test_small_types_dropped_everywhere(self):
        stats = summarize_rows(_rows(EXAMPLE_ROWS))

        assert stats.count_by_type == {"foo": 2}
        assert stats.size_by_type == {"foo": 250_000}
        assert stats.sample_keys_by_type == {"foo": ["foo:1", "foo:2"]}

    def test_largest_entries_exclude_composer_rows_by_default(self):
        stats = summarize_rows(_rows(EXAMPLE_ROWS))

        assert [e.key for e in stats.largest_entries] == ["foo:1", "foo:2", "bar:1"]
        assert [e.type for e in stats.largest_entries] == ["foo", "foo", "bar"]
        assert stats.largest_entries[0].size_bytes == 200_000

    def test_rank_composer_entries_keeps_scan_order_for_ties(self):
        stats = summarize_rows(_rows(EXAMPLE_ROWS), rank_composer_entries=True)

        # composerData:1 and foo:2 are both 50000 bytes; composerData:1 was read first
        assert [e.key for e in stats.largest_entries] == [
            "foo:1",
            "composerData:1",
            "foo:2",
            "bar:1",
        ]
        assert stats.largest_entries[1].type == "composerData"

    def test_null_values_only_count_as_read(self):
        stats = summarize_rows(_rows([("foo:1", None), ("composerData:2", None), ("foo:2", "abc")]))

        assert stats.rows_read == 3
        assert stats.total_entries == 1
        assert stats.other_entries == 1
        assert stats.composer_entries == 0
        assert stats.total_size_bytes == 3
        assert [e.key for e in stats.largest_entries] == ["foo:2"]

    def test_empty_values_only_count_as_read(self):
        stats = summarize_rows(
            _rows([("foo:1", ""), ("composerData:1", ""), ("bar:1", "abc")]),
            min_type_size_bytes=0,
            rank_composer_entries=True,
        )

        assert stats.rows_read == 3
        assert stats.total_entries == 1
        assert stats.composer_entries == 0
        assert stats.other_entries == 1
        assert stats.count_by_type == {"bar": 1}
        assert [e.key for e in stats.largest_entries] == ["bar:1"]

    def test_only_empty_values_give_empty_stats(self):
        stats = summarize_rows(_rows([("foo:1", ""), ("composerData:1", "")]))

        assert stats.rows_read == 2
        assert stats.total_entries == 0
        assert stats.largest_entries == []

    def test_entry_counts_add_up(self):
        pairs = [(f"type{i % 4}:{i}", "v" * (i * 10)) for i in range(40)]
        pairs += [(f"composerData:{i}", "c" * i) for i in range(7)]
        stats = summarize_rows(_rows(pairs))

        assert stats.other_entries + stats.composer_entries == stats.total_entries

    def test_largest_entries_limited_and_sorted(self):
        pairs = [(f"blob:{i}", "b" * ((i * 7919) % 1000 + 1)) for i in range(25)]
        stats = summarize_rows(_rows(pairs))

        sizes = [e.size_bytes for e in stats.largest_entries]
        assert len(sizes) == 10
        assert sizes == sorted(sizes, reverse=True)
        assert sizes[0] == max(len(v) for _, v in pairs)

    def test_samples_are_first_three_encountered(self):
        big = "q" * 60_000
        pairs = [(f"bubbleId:{i}", big) for i in range(5)]
        stats = summarize_rows(_rows(pairs))

        assert stats.sample_keys_by_type["bubbleId"] == ["bubbleId:0", "bubbleId:1", "bubbleId:2"]
        assert stats.count_by_type["bubbleId"] == 5

    def test_keys_without_colon_and_empty_prefix(self):
        big = "k" * 120_000
        stats = summarize_rows(_rows([("plainKey", big), (":noPrefix", big)]))

        assert stats.count_by_type == {"plainKey": 1, "unknown": 1}

    def test_threshold_is_configurable(self):
        stats = summarize_rows(_rows(EXAMPLE_ROWS), min_type_size_bytes=0)
        assert stats.count_by_type == {"foo": 2, "bar": 1}

    def test_empty_input(self):
        assert summarize_rows([]) == GlobalStats()


class TestAnalyzeGlobalDatabase:
    """Tests for reading and analyzing the global database file."""

    @pytest.mark.asyncio
    async def test_reads_global_table(self, tmp_path):
        db_path = create_kv_db(tmp_path / "state.vscdb", GLOBAL_TABLE, EXAMPLE_ROWS)

        stats = await analyze_global_database(db_path, GLOBAL_TABLE)

        assert stats.composer_entries == 1
        assert stats.other_entries == 3
        assert stats.count_by_type == {"foo": 2}

    @pytest.mark.asyncio
    async def test_null_and_empty_rows_in_file(self, tmp_path):
        db_path = create_kv_db(
            tmp_path / "state.vscdb",
            GLOBAL_TABLE,
            [("foo:1", None), ("foo:2", ""), ("composerData:1", b""), ("foo:3", "abc")],
        )

        stats = await analyze_global_database(db_path, GLOBAL_TABLE, rank_composer_entries=True)

        assert stats.rows_read == 4
        assert stats.total_entries == 1
        assert [e.key for e in stats.largest_entries] == ["foo:3"]

    @pytest.mark.asyncio
    async def test_missing_file_gives_empty_stats(self, tmp_path):
        stats = await analyze_global_database(tmp_path / "missing.vscdb", GLOBAL_TABLE)
        assert stats == GlobalStats()

    @pytest.mark.asyncio
    async def test_unreadable_file_gives_empty_stats(self, tmp_path):
        db_path = write_corrupt_db(tmp_path / "state.vscdb")
        stats = await analyze_global_database(db_path, GLOBAL_TABLE)
        assert stats == GlobalStats()

    @pytest.mark.asyncio
    async def test_wrong_table_gives_empty_stats(self, tmp_path):
        db_path = create_kv_db(tmp_path / "state.vscdb", "ItemTable", EXAMPLE_ROWS)
        stats = await analyze_global_database(db_path, GLOBAL_TABLE)
        assert stats == GlobalStats()

    @pytest.mark.asyncio
    async def test_repeated_analysis_is_identical(self, tmp_path):
        db_path = create_kv_db(tmp_path / "state.vscdb", GLOBAL_TABLE, EXAMPLE_ROWS)

        first = await analyze_global_database(db_path, GLOBAL_TABLE)
        second = await analyze_global_database(db_path, GLOBAL_TABLE)

        assert first == second
