"""ReportGenerator class for rendering hours reports."""
from io import StringIO
from typing import Optional

from tabulate import tabulate

from .totals import HoursReport, ProjectTotals
from ..utils.format_utils import format_hours, hours_to_hm, percent
from ..utils.file_utils import write_csv


class ReportGenerator:
    """Class for rendering an HoursReport as text tables."""

    def __init__(self, report: HoursReport, title: str = ""):
        """Initialize a ReportGenerator.

        Args:
            report: Hours report to render
            title: Heading suffix; defaults to the report's date range
        """
        self.report = report
        self.title = title or report.date_range_str
        self.totals = report.totals or ProjectTotals(report.sessions)

    def generate_report(self, csv_prefix: Optional[str] = None, entries_table: bool = False) -> str:
        """Generate the grouped report.

        Args:
            csv_prefix: Prefix for CSV files (optional)
            entries_table: Whether to list the individual sessions first

        Returns:
            Report as a string
        """
        output = StringIO()

        if entries_table:
            self._generate_entries_table(output, csv_prefix)
        self._generate_project_table(output, csv_prefix)
        self._generate_totals_line(output)

        return output.getvalue()

    def _generate_entries_table(self, output: StringIO, csv_prefix: Optional[str] = None):
        """Generate the sessions table.

        Args:
            output: StringIO to write to
            csv_prefix: Prefix for CSV files (optional)
        """
        headers = ["#", "Date", "Start", "End", "Duration", "Project"]
        rows = [session.to_row(idx + 1) for idx, session in enumerate(self.report.sessions)]

        print(f"\n### Sessions {self.title}:", file=output)
        print(tabulate(rows, headers=headers, tablefmt="github"), file=output)

        if csv_prefix:
            write_csv(f"{csv_prefix}_sessions.csv", headers, rows)

    def _generate_project_table(self, output: StringIO, csv_prefix: Optional[str] = None):
        """Generate the hierarchical project table.

        Args:
            output: StringIO to write to
            csv_prefix: Prefix for CSV files (optional)
        """
        headers = ["Project", "SubProject", "Path", "Hours", "Duration", "%"]
        total = self.totals.total
        table = [
            [project, sub, path, format_hours(hours), hours_to_hm(hours), percent(hours, total)]
            for project, sub, path, hours in self.totals.rows()
        ]

        print(f"\n### Time by Project {self.title}:", file=output)
        print(tabulate(table, headers=headers, tablefmt="github", disable_numparse=True), file=output)

        if csv_prefix:
            write_csv(f"{csv_prefix}_projects.csv", headers, table)

    def _generate_totals_line(self, output: StringIO):
        """Generate the grand total.

        Args:
            output: StringIO to write to
        """
        print("--------------------", file=output)
        print(f"{format_hours(self.report.total):>15}h", file=output)
