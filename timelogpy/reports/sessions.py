"""Session reconstruction and clock-state queries over timelog lines.

Sessions are paired by position: the n-th clock-in of a range goes with the
n-th clock-out of the same range. Out-of-order or unbalanced logs therefore
never fail, but they may pair records that were not meant to belong together.
"""
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from ..errors import NotFoundError
from .log_entry import CLOCK_IN, CLOCK_OUT, LogEntry, Session, parse_entries, split_record
from ..utils.date_utils import in_range


def record_kind(line: str) -> Optional[str]:
    """Get the kind of a clock record line.

    Args:
        line: Raw log line

    Returns:
        "i", "o", or None if the line is not a clock record
    """
    parts = split_record(line)
    return parts[0] if parts else None


def record_project(line: str) -> str:
    """Get the project path written after the timestamp of a record line."""
    parts = split_record(line)
    return " ".join(parts[3:]) if parts else ""


def last_record_kind(lines: Iterable[str]) -> Optional[str]:
    """Get the kind of the last clock record in the log.

    Args:
        lines: Raw log lines

    Returns:
        "i", "o", or None if the log holds no records
    """
    last = None
    for line in lines:
        kind = record_kind(line)
        if kind is not None:
            last = kind
    return last


def current_project(lines: Iterable[str]) -> str:
    """Get the project of the most recent clock-in record.

    Raises:
        NotFoundError: If no clock-in record carries a project
    """
    project = ""
    for line in lines:
        if record_kind(line) == CLOCK_IN:
            project = record_project(line)
    if not project:
        raise NotFoundError("no current project")
    return project


def last_closed_project(lines: Sequence[str], count: int = 1) -> str:
    """Get the project of the count-th last closed session.

    The count-th clock-out from the end is located, then the nearest
    clock-in before it supplies the project.

    Args:
        lines: Raw log lines
        count: 1 for the last closed session, 2 for the one before, ...

    Returns:
        Project path

    Raises:
        NotFoundError: If there are not enough closed sessions
    """
    kinds = [record_kind(line) for line in lines]
    out_indices = [i for i, kind in enumerate(kinds) if kind == CLOCK_OUT]
    if count < 1 or len(out_indices) < count:
        raise NotFoundError("not enough closed projects")

    out_idx = out_indices[len(out_indices) - count]
    for i in range(out_idx - 1, -1, -1):
        if kinds[i] == CLOCK_IN:
            project = record_project(lines[i])
            if project:
                return project
            break
    raise NotFoundError("no closed project found for given count")


def recent_projects(lines: Iterable[str], limit: int = 10) -> List[str]:
    """Get distinct clock-in projects, most recent first.

    Args:
        lines: Raw log lines
        limit: Maximum number of projects to return

    Returns:
        List of project paths
    """
    projects = [record_project(line) for line in lines if record_kind(line) == CLOCK_IN]
    unique = []
    for project in reversed(projects):
        if project and project not in unique:
            unique.append(project)
            if len(unique) == limit:
                break
    return unique


def pair_sessions(ins: Sequence[LogEntry], out_times: Sequence[datetime],
                  open_end: Optional[datetime] = None) -> List[Session]:
    """Pair clock-ins with clock-outs by position.

    Only min(len(ins), len(out_times)) pairs are formed; surplus records are
    dropped. Pairs with a non-positive duration are discarded.

    Args:
        ins: Clock-in entries in file order
        out_times: Clock-out times in file order
        open_end: Synthesized end time of a still running session; when given
            it is appended to out_times and its session is marked open

    Returns:
        List of sessions
    """
    out_times = list(out_times)
    if open_end is not None:
        out_times.append(open_end)

    sessions = []
    for idx, (entry, end) in enumerate(zip(ins, out_times)):
        is_open = open_end is not None and idx == len(out_times) - 1
        session = Session(entry.timestamp, end, entry.project, is_open=is_open)
        if session.duration_sec > 0:
            sessions.append(session)
    return sessions


def sessions_in_range(lines: Sequence[str], start: str, end: str, now: datetime) -> List[Session]:
    """Reconstruct the sessions of an inclusive ISO date range.

    A trailing clock-in is closed at `now` if the log currently reads
    "clocked in", the range holds exactly one more clock-in than clock-outs,
    and today lies within the range.

    Args:
        lines: Raw log lines of the whole log
        start: First date (YYYY-MM-DD)
        end: Last date (YYYY-MM-DD)
        now: Current local time

    Returns:
        List of sessions with a positive duration
    """
    ins = []
    out_times = []
    for entry in parse_entries(lines):
        if not in_range(entry.date_str, start, end):
            continue
        if entry.is_in:
            ins.append(entry)
        else:
            out_times.append(entry.timestamp)

    open_end = None
    today = now.strftime("%Y-%m-%d")
    if (last_record_kind(lines) == CLOCK_IN and in_range(today, start, end)
            and len(ins) == len(out_times) + 1):
        open_end = now
    return pair_sessions(ins, out_times, open_end)
