"""Human-readable size formatting."""

KB = 1024
MB = 1024 * 1024


def utf8_size(value: str | None) -> int:
    """Return the UTF-8 encoded length of a stored value (0 for None)."""
    if value is None:
        return 0
    return len(value.encode("utf-8"))


def format_megabytes(size_mb: float) -> str:
    """
    Format a size given in megabytes.

    Tiers:
        < 0.001 MB  -> "< 1 KB"
        < 1 MB      -> "512.0 KB"
        < 1024 MB   -> "12.34 MB"
        otherwise   -> "1.50 GB"
    """
    if size_mb < 0.001:
        return "< 1 KB"
    if size_mb < 1:
        return f"{size_mb * 1024:.1f} KB"
    if size_mb < 1024:
        return f"{size_mb:.2f} MB"
    return f"{size_mb / 1024:.2f} GB"


def format_size(num_bytes: int) -> str:
    """Format a byte count using the same tiers as format_megabytes."""
    return format_megabytes(num_bytes / MB)
