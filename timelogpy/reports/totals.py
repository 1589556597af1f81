"""Aggregation of sessions into flat and hierarchical project totals."""
from collections import defaultdict
from typing import Dict, List, Optional

from .log_entry import Session


def _plain(nested: Dict[str, Dict[str, float]]) -> Dict[str, Dict[str, float]]:
    return {key: dict(inner) for key, inner in nested.items()}


class ProjectTotals:
    """Hours per project, grouped along the colon-separated project path.

    Attributes:
        projects: top project -> hours
        sub_projects: top project -> sub-project -> hours
        sub_paths: sub-project -> remainder path -> hours. Keyed by the
            sub-project name alone, so equally named sub-projects of
            different top projects share one bucket.
        project_paths: top project -> full project path -> hours
    """

    def __init__(self, sessions: List[Session]):
        """Initialize ProjectTotals.

        Args:
            sessions: Sessions to aggregate
        """
        projects = defaultdict(float)
        sub_projects = defaultdict(lambda: defaultdict(float))
        sub_paths = defaultdict(lambda: defaultdict(float))
        project_paths = defaultdict(lambda: defaultdict(float))

        for session in sessions:
            hours = session.hours
            top = session.top_project
            projects[top] += hours
            project_paths[top][session.project] += hours

            sub = session.sub_project
            if sub is None:
                continue
            sub_projects[top][sub] += hours

            path = session.sub_path
            if path is not None:
                sub_paths[sub][path] += hours

        self.projects = dict(projects)
        self.sub_projects = _plain(sub_projects)
        self.sub_paths = _plain(sub_paths)
        self.project_paths = _plain(project_paths)

    @property
    def total(self) -> float:
        return sum(self.projects.values())

    def rows(self) -> List[List]:
        """Flatten the hierarchy into table rows, largest projects first.

        Returns:
            Rows of [project, sub-project, path, hours]
        """
        rows = []
        for project, hours in sorted(self.projects.items(), key=lambda x: x[1], reverse=True):
            rows.append([project, "", "", hours])
            subs = self.sub_projects.get(project, {})
            for sub, sub_hours in sorted(subs.items(), key=lambda x: x[1], reverse=True):
                rows.append(["", sub, "", sub_hours])
                paths = self.sub_paths.get(sub, {})
                for path, path_hours in sorted(paths.items(), key=lambda x: x[1], reverse=True):
                    rows.append(["", "", path, path_hours])
        return rows


class HoursReport:
    """Result of an hours query over an inclusive date range."""

    def __init__(self, start: str, end: str, sessions: List[Session], group: bool = False):
        """Initialize an HoursReport.

        Args:
            start: First date of the range (YYYY-MM-DD)
            end: Last date of the range (YYYY-MM-DD)
            sessions: Sessions with a positive duration inside the range
            group: Whether to compute project totals
        """
        self.start = start
        self.end = end
        self.sessions = sessions
        self.total = sum(session.hours for session in sessions)
        self.totals: Optional[ProjectTotals] = ProjectTotals(sessions) if group else None

    @property
    def project_totals(self) -> Optional[Dict[str, float]]:
        return self.totals.projects if self.totals else None

    @property
    def hierarchical_totals(self) -> Optional[Dict[str, Dict[str, float]]]:
        return self.totals.sub_projects if self.totals else None

    @property
    def date_range_str(self) -> str:
        return self.start if self.start == self.end else f"{self.start} to {self.end}"
