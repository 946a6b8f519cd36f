"""Formatting utilities.

Pure functions for presenting durations, sizes and rates to the user.
"""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounded up.

    The built-in round() uses banker's rounding, which would turn a
    3413.5 kbps target into 3414 but a 3412.5 one into 3412.

    Args:
        value: Non-negative number to round.

    Returns:
        Rounded integer.
    """
    return int(math.floor(value + 0.5))


def format_hms(total_seconds: float) -> str:
    """Format seconds as HH:MM:SS.

    Negative, NaN or infinite values are shown as 00:00:00.

    Examples:
        >>> format_hms(3723.45)
        '01:02:03'
    """
    if not math.isfinite(total_seconds) or total_seconds < 0:
        total_seconds = 0
    hours = int(total_seconds // 3600)
    minutes = int((total_seconds % 3600) // 60)
    seconds = int(total_seconds % 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_megabytes(size_bytes: int) -> str:
    """Format a byte count as mebibytes with two decimals (e.g. "97.66 MB")."""
    return f"{size_bytes / (1024 * 1024):.2f} MB"


def format_ratio(ratio: float | None) -> str:
    """Format an output/input size ratio as a percentage of the original."""
    if ratio is None:
        return "n/a"
    return f"{ratio * 100:.1f}% of original"
