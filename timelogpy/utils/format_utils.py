"""Formatting utility functions for timelogPy."""


def format_hm(seconds: int) -> str:
    """Format seconds as HH:MM.

    Args:
        seconds: Number of seconds (can be negative)

    Returns:
        Formatted time string (with leading '-' if negative)
    """
    if seconds < 0:
        abs_seconds = abs(seconds)
        return f"-{abs_seconds // 3600:02}:{(abs_seconds % 3600) // 60:02}"
    return f"{seconds // 3600:02}:{(seconds % 3600) // 60:02}"


def format_hours(hours: float) -> str:
    """Format fractional hours with two decimals.

    Args:
        hours: Number of hours

    Returns:
        Formatted string, e.g. "8.00"
    """
    return f"{hours:.2f}"


def hours_to_hm(hours: float) -> str:
    """Format fractional hours as HH:MM.

    Args:
        hours: Number of hours

    Returns:
        Formatted time string
    """
    return format_hm(int(round(hours * 3600)))


def percent(val: float, total: float) -> str:
    """Calculate percentage and format as string.

    Args:
        val: Value
        total: Total

    Returns:
        Formatted percentage string
    """
    return f"{(val / total * 100):.0f}" if total else "0"
