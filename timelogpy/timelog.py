"""
Timelog: clock actions and reports on top of a single timelog file.
"""
from datetime import datetime
from typing import Callable, List, Optional

from .errors import MalformedLineError, NotFoundError, StateError, TimelogError
from .reports.log_entry import CLOCK_IN, CLOCK_OUT, DATETIME_FORMAT, LogEntry, split_record
from .reports.sessions import (
    current_project,
    last_closed_project,
    last_record_kind,
    record_kind,
    recent_projects,
    sessions_in_range,
)
from .reports.totals import HoursReport
from .store.log_file import TimelogFile
from .utils.date_utils import get_day_range, get_weeks_ago_range

DEFAULT_TIMELOG_FILE = "timelog.txt"


class ValidationWarning:
    """A problem found in the timelog file that does not stop processing."""

    def __init__(self, line_no: int, message: str):
        self.line_no = line_no
        self.message = message

    def __str__(self) -> str:
        return f"line {self.line_no} {self.message}"

    def __repr__(self) -> str:
        return f"ValidationWarning({self.line_no}, {self.message!r})"


class Timelog:
    """Clock actions and reports for one timelog file.

    Every operation reads the file afresh; nothing is cached between calls.
    """

    def __init__(self, path: str = DEFAULT_TIMELOG_FILE, now: Optional[Callable[[], datetime]] = None):
        """Initialize a Timelog.

        Args:
            path: Path of the timelog file
            now: Callable returning the current local time (defaults to datetime.now)
        """
        self.file = TimelogFile(path)
        self._now = now or datetime.now

    @property
    def path(self) -> str:
        return self.file.path

    def now(self) -> datetime:
        return self._now().replace(microsecond=0)

    # --- Clock state ---
    def last_kind(self) -> Optional[str]:
        """Get the kind of the last record; a missing file counts as empty."""
        return last_record_kind(self.file.read_lines_or_empty())

    def is_clocked_in(self) -> bool:
        return self.last_kind() == CLOCK_IN

    def _record(self, kind: str, project: str, when: datetime) -> str:
        if "\n" in project or "\r" in project:
            raise TimelogError("project must be a single line")
        return LogEntry(kind, when, project.strip()).to_line()

    def clock_in(self, project: str) -> str:
        """Append a clock-in record.

        Args:
            project: Project path to clock into

        Returns:
            The written line

        Raises:
            StateError: If already clocked in
            TimelogError: If the text contains a line break
            OSError: If the file cannot be written
        """
        if self.is_clocked_in():
            raise StateError("already checked in")
        line = self._record(CLOCK_IN, project, self.now())
        self.file.append_line(line)
        return line

    def clock_out(self, project: str = "") -> str:
        """Append a clock-out record.

        Args:
            project: Optional trailing text for the record

        Returns:
            The written line

        Raises:
            StateError: If already clocked out
            TimelogError: If the text contains a line break
            OSError: If the file cannot be written
        """
        if not self.is_clocked_in():
            raise StateError("already checked out")
        line = self._record(CLOCK_OUT, project, self.now())
        self.file.append_line(line)
        return line

    def switch_project(self, project: str) -> List[str]:
        """Clock out of the current project and into another one.

        Both records share one timestamp and are written in one append.

        Returns:
            The written lines

        Raises:
            StateError: If clocked out or already on the project
            TimelogError: If the project contains a line break
            OSError: If the file cannot be written
        """
        lines = self.file.read_lines_or_empty()
        if last_record_kind(lines) != CLOCK_IN:
            raise StateError("not checked in")
        try:
            current = current_project(lines)
        except NotFoundError:
            current = ""
        if current == project.strip():
            raise StateError("already checked in to this project")
        when = self.now()
        written = [self._record(CLOCK_OUT, "", when), self._record(CLOCK_IN, project, when)]
        self.file.append_lines(written)
        return written

    # --- Project queries ---
    def current_project(self) -> str:
        """Get the project of the most recent clock-in.

        Raises:
            NotFoundError: If the log has no clock-in with a project
            OSError: If the file cannot be read
        """
        return current_project(self.file.read_lines())

    def last_closed_project(self, count: int = 1) -> str:
        """Get the project of the count-th last closed session.

        Raises:
            NotFoundError: If fewer than count sessions were closed
            OSError: If the file cannot be read
        """
        return last_closed_project(self.file.read_lines(), count)

    def recent_projects(self, limit: int = 10) -> List[str]:
        return recent_projects(self.file.read_lines_or_empty(), limit)

    # --- Hours ---
    def hours_for(self, start: str, end: str, group: bool = False) -> HoursReport:
        """Sum the hours worked in an inclusive date range.

        Args:
            start: First date (YYYY-MM-DD)
            end: Last date (YYYY-MM-DD)
            group: Whether to compute per-project totals

        Returns:
            HoursReport with total, sessions and optional project totals

        Raises:
            OSError: If the file cannot be read
        """
        sessions = sessions_in_range(self.file.read_lines(), start, end, self.now())
        return HoursReport(start, end, sessions, group)

    def hours_for_day(self, days_ago: int = 0, group: bool = False) -> HoursReport:
        start, end = get_day_range(self.now().date(), days_ago)
        return self.hours_for(start.isoformat(), end.isoformat(), group)

    def hours_today(self, group: bool = False) -> HoursReport:
        return self.hours_for_day(0, group)

    def hours_for_week(self, weeks_ago: int = 0, group: bool = False) -> HoursReport:
        start, end = get_weeks_ago_range(self.now().date(), weeks_ago)
        return self.hours_for(start.isoformat(), end.isoformat(), group)

    def hours_this_week(self, group: bool = False) -> HoursReport:
        return self.hours_for_week(0, group)

    # --- Raw excerpts ---
    def cat_entries(self, only_in: bool = False, days: int = 1) -> List[str]:
        """Get the raw lines of the last `days` distinct dates in the log.

        Lines without a date field of at least 10 characters are skipped.

        Args:
            only_in: Restrict to clock-in records
            days: Number of distinct dates to include

        Returns:
            Matching lines in file order

        Raises:
            OSError: If the file cannot be read
        """
        selected = []
        dates = []
        for line in self.file.read_lines():
            parts = line.split()
            if only_in and record_kind(line) != CLOCK_IN:
                continue
            if len(parts) < 2 or len(parts[1]) < 10:
                continue
            day = parts[1][:10]
            selected.append((day, line))
            if day not in dates:
                dates.append(day)

        days = max(0, min(days, len(dates)))
        last_days = set(dates[len(dates) - days:])
        return [line for day, line in selected if day in last_days]

    # --- Validation ---
    def validate(self) -> List[ValidationWarning]:
        """Check the file for malformed and out-of-order records.

        Returns:
            Warnings in file order; an empty list means the file is clean

        Raises:
            OSError: If the file cannot be read
        """
        warnings = []
        last_time = None
        for line_no, line in enumerate(self.file.read_lines(), start=1):
            if not (line.startswith("i ") or line.startswith("o ")):
                continue
            if split_record(line) is None:
                warnings.append(ValidationWarning(line_no, f"malformed: {line}"))
                continue
            try:
                entry = LogEntry.from_line(line, line_no)
            except MalformedLineError:
                warnings.append(ValidationWarning(line_no, f"invalid time: {line}"))
                continue
            if last_time is not None and entry.timestamp < last_time:
                warnings.append(ValidationWarning(
                    line_no,
                    f"time {entry.timestamp.strftime(DATETIME_FORMAT)} before previous entry "
                    f"({last_time.strftime(DATETIME_FORMAT)})"))
            last_time = entry.timestamp
        return warnings
