"""Date utility functions for timelogPy."""
from datetime import date, timedelta
from typing import Tuple


def get_day_range(today: date, days_ago: int = 0) -> Tuple[date, date]:
    """Get a single-day range counted back from today.

    Args:
        today: Current date
        days_ago: Number of days to go back (0 = today)

    Returns:
        Tuple of (start_date, end_date), both the same day
    """
    day = today - timedelta(days=days_ago)
    return day, day


def get_week_range(target_date: date) -> Tuple[date, date]:
    """Get the Monday-Sunday range of the week containing the target date.

    Args:
        target_date: Date within the week

    Returns:
        Tuple of (start_date, end_date)
    """
    start = target_date - timedelta(days=target_date.weekday())
    end = start + timedelta(days=6)
    return start, end


def get_weeks_ago_range(today: date, weeks_ago: int = 0) -> Tuple[date, date]:
    """Get the Monday-Sunday range of a week counted back from the current one.

    Args:
        today: Current date
        weeks_ago: Number of weeks to go back (0 = this week)

    Returns:
        Tuple of (start_date, end_date)
    """
    return get_week_range(today - timedelta(days=7 * weeks_ago))


def in_range(day: str, start: str, end: str) -> bool:
    """Check an ISO date string against an inclusive ISO date range.

    The fixed-width YYYY-MM-DD format orders lexicographically.
    """
    return start <= day <= end
