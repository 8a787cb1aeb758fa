"""Tests for size formatting."""

import pytest

from storage_dashboard.sizes import KB, MB, format_megabytes, format_size, utf8_size


class TestFormatSize:
    """Tests for format_size / format_megabytes tiers."""

    @pytest.mark.parametrize(
        "num_bytes,expected",
        [
            (0, "< 1 KB"),
            (1000, "< 1 KB"),
            (2 * KB, "2.0 KB"),
            (512 * KB, "512.0 KB"),
            (MB, "1.00 MB"),
            (int(12.5 * MB), "12.50 MB"),
            (1024 * MB, "1.00 GB"),
            (int(1.5 * 1024 * MB), "1.50 GB"),
        ],
    )
    def test_tiers(self, num_bytes, expected):
        assert format_size(num_bytes) == expected

    def test_megabyte_input(self):
        assert format_megabytes(0.5) == "512.0 KB"
        assert format_megabytes(0.0005) == "< 1 KB"
        assert format_megabytes(2048) == "2.00 GB"

    @pytest.mark.parametrize(
        "sizes,unit",
        [
            ([2 * KB, 10 * KB, 300 * KB, 1000 * KB], "KB"),
            ([MB, 5 * MB, 999 * MB], "MB"),
            ([1024 * MB, 3000 * MB, 10_000 * MB], "GB"),
        ],
    )
    def test_monotonic_within_tier(self, sizes, unit):
        formatted = [format_size(s) for s in sizes]
        assert all(f.endswith(unit) for f in formatted)
        values = [float(f.split()[0]) for f in formatted]
        assert values == sorted(values)


class TestUtf8Size:
    def test_counts_encoded_bytes(self):
        assert utf8_size("abc") == 3
        assert utf8_size("é") == 2
        assert utf8_size("€") == 3

    def test_none_is_zero(self):
        assert utf8_size(None) == 0
