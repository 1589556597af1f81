"""Utility modules for timelogPy."""

from .date_utils import get_day_range, get_week_range, get_weeks_ago_range
from .format_utils import format_hm, format_hours, hours_to_hm, percent
from .file_utils import write_csv, write_markdown

__all__ = [
    'get_day_range', 'get_week_range', 'get_weeks_ago_range',
    'format_hm', 'format_hours', 'hours_to_hm', 'percent',
    'write_csv', 'write_markdown'
]
