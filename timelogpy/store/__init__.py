"""Log file access for timelogPy."""

from .log_file import TimelogFile

__all__ = ['TimelogFile']
