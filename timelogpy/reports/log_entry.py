"""LogEntry and Session classes for representing parsed timelog records."""
from datetime import datetime
from typing import Iterable, Iterator, List, Optional

from ..errors import MalformedLineError
from ..utils.format_utils import format_hm

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"
CLOCK_IN = "i"
CLOCK_OUT = "o"
PROJECT_SEPARATOR = ":"


def split_record(line: str) -> Optional[List[str]]:
    """Split a line into fields if it is shaped like a clock record.

    Args:
        line: Raw log line

    Returns:
        The whitespace-separated fields, or None if the line is not a record
    """
    parts = line.split()
    if len(parts) < 3 or parts[0] not in (CLOCK_IN, CLOCK_OUT):
        return None
    return parts


class LogEntry:
    """Class representing a single clock-in or clock-out record."""

    def __init__(self, kind: str, timestamp: datetime, project: str = "",
                 line: str = "", line_no: int = 0):
        """Initialize a LogEntry.

        Args:
            kind: "i" for clock-in, "o" for clock-out
            timestamp: Local naive timestamp of the record
            project: Project path (colon-separated)
            line: Raw line text
            line_no: 1-based line number in the log file
        """
        self.kind = kind
        self.timestamp = timestamp
        self.project = project
        self.line = line
        self.line_no = line_no

    @classmethod
    def from_line(cls, line: str, line_no: int = 0) -> Optional["LogEntry"]:
        """Parse a raw line.

        Args:
            line: Raw log line
            line_no: 1-based line number in the log file

        Returns:
            A LogEntry, or None if the line is not a clock record

        Raises:
            MalformedLineError: If the line is a record with an unparseable timestamp
        """
        parts = split_record(line)
        if parts is None:
            return None
        try:
            timestamp = datetime.strptime(f"{parts[1]} {parts[2]}", DATETIME_FORMAT)
        except ValueError:
            raise MalformedLineError(line_no, line)
        return cls(parts[0], timestamp, " ".join(parts[3:]), line, line_no)

    @property
    def is_in(self) -> bool:
        return self.kind == CLOCK_IN

    @property
    def date_str(self) -> str:
        """Get the ISO date of the record.

        Returns:
            Date string (YYYY-MM-DD)
        """
        return self.timestamp.strftime(DATE_FORMAT)

    def to_line(self) -> str:
        """Render the entry in log file format.

        Returns:
            Log line without trailing newline
        """
        text = f"{self.kind} {self.timestamp.strftime(DATETIME_FORMAT)}"
        return f"{text} {self.project}" if self.project else text

    def __repr__(self) -> str:
        return f"LogEntry({self.to_line()!r})"


def parse_entries(lines: Iterable[str]) -> Iterator[LogEntry]:
    """Parse clock records from raw lines, skipping everything else.

    Lines with an unparseable timestamp are skipped as well.

    Args:
        lines: Raw log lines in file order

    Yields:
        Parsed entries in file order
    """
    for line_no, line in enumerate(lines, start=1):
        try:
            entry = LogEntry.from_line(line, line_no)
        except MalformedLineError:
            continue
        if entry is not None:
            yield entry


class Session:
    """Class representing a reconstructed work interval."""

    def __init__(self, start: datetime, end: datetime, project: str = "", is_open: bool = False):
        """Initialize a Session.

        Args:
            start: Clock-in time
            end: Clock-out time (or "now" for an open session)
            project: Project path of the clock-in record
            is_open: Whether the end time was synthesized from the current time
        """
        self.start = start
        self.end = end
        self.project = project
        self.is_open = is_open

    @property
    def duration_sec(self) -> float:
        return (self.end - self.start).total_seconds()

    @property
    def hours(self) -> float:
        return self.duration_sec / 3600

    @property
    def segments(self) -> List[str]:
        """Get the project path split into its hierarchy levels.

        Returns:
            Path segments; a session without project yields [""]
        """
        return self.project.split(PROJECT_SEPARATOR)

    @property
    def top_project(self) -> str:
        return self.segments[0]

    @property
    def sub_project(self) -> Optional[str]:
        segments = self.segments
        return segments[1] if len(segments) > 1 else None

    @property
    def sub_path(self) -> Optional[str]:
        """Get the remainder of the path below the sub-project.

        Returns:
            Remaining segments joined with ":", or None if there are none
        """
        segments = self.segments
        return PROJECT_SEPARATOR.join(segments[2:]) if len(segments) > 2 else None

    @property
    def start_hm(self) -> str:
        return self.start.strftime("%H:%M")

    @property
    def end_hm(self) -> str:
        return self.end.strftime("%H:%M")

    @property
    def duration_hm(self) -> str:
        return format_hm(int(self.duration_sec))

    def to_row(self, index: int) -> List:
        """Convert to a table row.

        Args:
            index: Position of the session in the report

        Returns:
            Table row as a list
        """
        return [
            index,
            self.start.strftime(DATE_FORMAT),
            self.start_hm,
            self.end_hm + (" (open)" if self.is_open else ""),
            self.duration_hm,
            self.project,
        ]

    def __repr__(self) -> str:
        return f"Session({self.start} -> {self.end}, {self.project!r}, {self.hours:.2f}h)"
