"""
timelogPy: A CLI tool for clocking in and out of projects in a plain-text timelog.

- Appends "i"/"o" records to an append-only timelog file
- Reports hours for today, past days and weeks, grouped by project hierarchy
- Shows raw excerpts of the log and validates its order
- Can be used as a CLI (via `python -m timelogpy` or `timelogpy` if installed as a package)
"""

from .timelog import Timelog

__version__ = "0.1.0"

__all__ = ['Timelog']
