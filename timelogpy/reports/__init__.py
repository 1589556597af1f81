"""Log interpretation and report modules for timelogPy."""

from .log_entry import LogEntry, Session
from .totals import HoursReport, ProjectTotals
from .report_generator import ReportGenerator

__all__ = ['LogEntry', 'Session', 'HoursReport', 'ProjectTotals', 'ReportGenerator']
