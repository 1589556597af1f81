"""Main module for the timelogPy package."""
import os
import re
import sys
import argparse
from typing import List, Optional, Tuple
from dotenv import load_dotenv

from .errors import NotFoundError, StateError, TimelogError
from .timelog import DEFAULT_TIMELOG_FILE, Timelog
from .reports.report_generator import ReportGenerator
from .reports.totals import HoursReport
from .utils.format_utils import format_hours
from .utils.file_utils import write_markdown

ENV_FILE_NAME = 'timelogpy.env'
TIMELOG_ENV_VAR = 'TIMELOG'

# Actions whose count can be given as trailing carets, e.g. "yd^^" or "last^"
COUNTED_ACTIONS = ('last', 'yd', 'lw', 'ins', 'cat')
COUNTED_ACTION_RE = re.compile(r'^(%s)(\^*)$' % '|'.join(COUNTED_ACTIONS))
PROJECT_ACTIONS = ('in', 'out', 'sw', 'switch')
PLAIN_ACTIONS = ('cur', 'st', 'hours', 'td', 'hoursago', 'thisweek', 'tw', 'validate', 'timelog')


# --- Environment Setup ---
def load_environment():
    """Load environment variables from a timelogpy.env file, if there is one.

    The current directory is checked first, then the directory above the package.
    Variables already set in the environment win.
    """
    candidates = [
        os.path.join(os.getcwd(), ENV_FILE_NAME),
        os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), ENV_FILE_NAME),
    ]
    for env_file in candidates:
        if os.path.exists(env_file):
            load_dotenv(env_file, override=False)
            return


def resolve_timelog_path(file_arg: Optional[str] = None) -> str:
    """Resolve the timelog file path.

    Args:
        file_arg: Path given on the command line (optional)

    Returns:
        The explicit path, else $TIMELOG, else timelog.txt
    """
    path = file_arg or os.getenv(TIMELOG_ENV_VAR) or DEFAULT_TIMELOG_FILE
    return os.path.expanduser(path)


def is_integer(value: str) -> bool:
    try:
        int(value)
    except ValueError:
        return False
    return True


def split_action(action: str) -> Tuple[str, Optional[int]]:
    """Split a caret-suffixed action into its name and count.

    Args:
        action: Action as typed, e.g. "yd^^"

    Returns:
        Tuple of (name, count); count is None for actions without a count
    """
    match = COUNTED_ACTION_RE.match(action)
    if not match:
        return action, None
    name, carets = match.groups()
    if name == 'lw':
        return name, len(carets)
    return name, 1 + len(carets)


def pop_trailing_file(action: str, args: List[str]) -> Tuple[List[str], Optional[str]]:
    """Take a trailing filename off the positional arguments.

    Only actions that never take free text qualify; their last argument is
    a filename unless it is a number.

    Args:
        action: Action name without carets
        args: Positional arguments after the action

    Returns:
        Tuple of (remaining args, filename or None)
    """
    if not args or action in PROJECT_ACTIONS:
        return args, None
    last = args[-1]
    if last.startswith('-') or is_integer(last):
        return args, None
    if last in PROJECT_ACTIONS or last in PLAIN_ACTIONS or split_action(last)[1] is not None:
        return args, None
    return args[:-1], last


# --- CLI Logic ---
def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser.

    Returns:
        Argument parser with usage text
    """
    parser = argparse.ArgumentParser(
        description="Clock in and out of projects and report hours from a plain-text timelog.",
        epilog="""
Actions:
  in <project>      clock into project (only if clocked out)
  out [text]        clock out (only if clocked in)
  sw <project>      switch projects (only if clocked in)
  cur, st           show the most recently clocked-in project
  last [N]          show the N-th last closed project
  hours, td         show hours worked today
  hoursago, yd [N]  show hours worked N days ago
  thisweek, tw      show hours worked this week
  lw [N]            show hours worked N weeks ago ("lw^" is last week)
  ins [N]           show clock-in lines of the last N days in the log
  cat [N]           show all lines of the last N days in the log
  validate          report malformed and out-of-order entries
  timelog           show the timelog file in use

Examples:
    # Hours of three days ago, grouped by project
  timelogpy yd^^ -g
    ---
    # Hours of last week exported to markdown
  timelogpy lw --md week.md

last, yd, lw, ins and cat take a count N, or ^ suffixes: "yd^" is two days ago.
If no --file is given, a trailing filename, the TIMELOG environment variable
(also read from timelogpy.env) or 'timelog.txt' is used, in that order.
""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        prog="timelogpy"
    )
    parser.add_argument('action', help='Action to run (see below)')
    parser.add_argument('args', nargs='*', help='Project, count or filename')
    parser.add_argument('-g', '-group', '--group', dest='group', action='store_true', help='Group hours by project hierarchy')
    parser.add_argument('-file', '--file', dest='file', help='Timelog file to use')
    parser.add_argument('--csv', help='Export grouped tables to CSV (provide filename prefix)')
    parser.add_argument('--md', help='Export the hours report as markdown to the given file path')
    parser.add_argument('--overwrite', action='store_true', help='Explicitly overwrite the markdown file if it exists (DANGEROUS)')
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments
    """
    return build_parser().parse_intermixed_args(argv)


def prompt_for_project(timelog: Timelog) -> str:
    """Let the user pick one of the recently used projects.

    Args:
        timelog: Timelog to read recent projects from

    Returns:
        Chosen project path

    Raises:
        NotFoundError: If the log has no projects yet
        TimelogError: If the selection is not a listed number
    """
    projects = timelog.recent_projects(10)
    if not projects:
        raise NotFoundError("No previous projects found.")
    print("Select a project:")
    for i, project in enumerate(projects, start=1):
        print(f"{i}: {project}")
    try:
        choice = input("Enter number: ").strip()
    except EOFError:
        raise TimelogError("Invalid selection.")
    if not is_integer(choice) or not 1 <= int(choice) <= len(projects):
        raise TimelogError("Invalid selection.")
    return projects[int(choice) - 1]


def print_hours(report: HoursReport, label: str, group: bool, csv_prefix: Optional[str] = None,
                md_path: Optional[str] = None, overwrite: bool = False) -> None:
    """Print an hours report, plain or grouped, and export it if requested.

    Args:
        report: Report to print
        label: Text after "Hours worked", e.g. "today"
        group: Whether to print the grouped project tables
        csv_prefix: Prefix for CSV files
        md_path: Path to export markdown
        overwrite: Whether to overwrite an existing markdown file
    """
    if group or csv_prefix or md_path:
        text = ReportGenerator(report, f"{label} ({report.date_range_str})").generate_report(
            csv_prefix, entries_table=bool(md_path))
    else:
        text = ""

    if md_path:
        write_markdown(md_path, f"\n{text}\n", report.start, report.end, overwrite)
        print(f"[SUCCESS] Markdown output written to '{md_path}'")
    elif group:
        print(text)
    else:
        print(f"Hours worked {label}: {format_hours(report.total)}")


def week_label(weeks_ago: int) -> str:
    if weeks_ago == 0:
        return "this week"
    if weeks_ago == 1:
        return "last week"
    return f"{weeks_ago} weeks ago"


def run_action(timelog: Timelog, action: str, args: List[str], parsed: argparse.Namespace) -> int:
    """Run one action against the timelog.

    Args:
        timelog: Timelog to operate on
        action: Action as typed (may carry carets)
        args: Positional arguments after the action
        parsed: All parsed command line arguments

    Returns:
        Process exit status
    """
    name, count = split_action(action)
    if count is not None and args and is_integer(args[0]):
        count = int(args[0])

    def hours(report: HoursReport, label: str):
        print_hours(report, label, parsed.group, parsed.csv, parsed.md, parsed.overwrite)

    if name in ('in', 'sw', 'switch'):
        # check the clock state before prompting for a project
        clocked_in = timelog.is_clocked_in()
        if name == 'in' and clocked_in:
            raise StateError("already checked in")
        if name != 'in' and not clocked_in:
            raise StateError("not checked in")
        project = " ".join(args) if args else prompt_for_project(timelog)
        if name == 'in':
            timelog.clock_in(project)
            print(f"Clocked in: {project}")
        else:
            timelog.switch_project(project)
            print(f"Switched to: {project}")
    elif name == 'out':
        timelog.clock_out(" ".join(args))
        print("Clocked out.")
    elif name in ('cur', 'st'):
        print("Current project:", timelog.current_project())
    elif name == 'last':
        print("Last closed project:", timelog.last_closed_project(count))
    elif name in ('hours', 'td'):
        hours(timelog.hours_today(parsed.group), "today")
    elif name in ('hoursago', 'yd'):
        days = count if count is not None else (int(args[0]) if args and is_integer(args[0]) else 0)
        hours(timelog.hours_for_day(days, parsed.group), f"{days} days ago")
    elif name in ('thisweek', 'tw'):
        hours(timelog.hours_this_week(parsed.group), "this week")
    elif name == 'lw':
        hours(timelog.hours_for_week(count, parsed.group), week_label(count))
    elif name in ('ins', 'cat'):
        for line in timelog.cat_entries(only_in=(name == 'ins'), days=count):
            print(line)
    elif name == 'validate':
        for warning in timelog.validate():
            print(f"Warning: {warning}")
    elif name == 'timelog':
        print(timelog.path)
    else:
        print(f"Unknown action: {action}")
        build_parser().print_help()
        return 2
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    load_environment()

    parsed = parse_args(argv)
    name, _ = split_action(parsed.action)
    args, trailing_file = pop_trailing_file(name, parsed.args)
    timelog = Timelog(resolve_timelog_path(parsed.file or trailing_file))

    try:
        status = run_action(timelog, parsed.action, args, parsed)
    except TimelogError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except OSError as e:
        print(f"[ERROR] {e}")
        sys.exit(1)
    sys.exit(status)


if __name__ == "__main__":
    main()
