import sys
import os
import shutil
import tempfile
import unittest
from datetime import datetime

# Add the parent directory to sys.path to import the timelogpy package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from timelogpy.errors import MalformedLineError, NotFoundError, StateError, TimelogError
from timelogpy.reports.log_entry import LogEntry, parse_entries, split_record
from timelogpy.reports.sessions import (
    current_project,
    last_closed_project,
    last_record_kind,
    recent_projects,
    sessions_in_range,
)
from timelogpy.reports.totals import ProjectTotals
from timelogpy.timelog import Timelog
from timelogpy.utils.date_utils import get_day_range, get_week_range, get_weeks_ago_range


class FakeClock:
    """Settable stand-in for datetime.now."""

    def __init__(self, now: datetime):
        self.current = now

    def __call__(self) -> datetime:
        return self.current


class TimelogTestCase(unittest.TestCase):
    """Base class providing a temporary timelog file."""

    def setUp(self):
        """Set up test fixtures."""
        self.tmp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmp_dir, "timelog.txt")
        self.clock = FakeClock(datetime(2024, 1, 1, 11, 30, 0))
        self.timelog = Timelog(self.path, now=self.clock)

    def tearDown(self):
        """Tear down test fixtures."""
        shutil.rmtree(self.tmp_dir)

    def write_log(self, *lines):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("".join(f"{line}\n" for line in lines))

    def read_log(self):
        with open(self.path, "r", encoding="utf-8") as f:
            return f.read().splitlines()


class TestEntryParser(unittest.TestCase):
    """Test parsing raw lines into log entries."""

    def test_split_record_requires_kind_and_three_fields(self):
        self.assertEqual(split_record("i 2024-01-01 09:00:00 acme"), ["i", "2024-01-01", "09:00:00", "acme"])
        self.assertEqual(split_record("o 2024-01-01 17:00:00"), ["o", "2024-01-01", "17:00:00"])
        self.assertIsNone(split_record("i 2024-01-01"))
        self.assertIsNone(split_record("x 2024-01-01 09:00:00 acme"))
        self.assertIsNone(split_record("in 2024-01-01 09:00:00 acme"))
        self.assertIsNone(split_record(""))

    def test_from_line_parses_project_path(self):
        entry = LogEntry.from_line("i 2024-01-01 09:00:00 acme:backend  api work", 3)
        self.assertTrue(entry.is_in)
        self.assertEqual(entry.timestamp, datetime(2024, 1, 1, 9, 0, 0))
        self.assertEqual(entry.project, "acme:backend api work")
        self.assertEqual(entry.date_str, "2024-01-01")
        self.assertEqual(entry.line_no, 3)

    def test_from_line_rejects_bad_timestamp(self):
        with self.assertRaises(MalformedLineError) as ctx:
            LogEntry.from_line("o 2024-13-01 10:00:00", 7)
        self.assertEqual(ctx.exception.line_no, 7)
        self.assertIsInstance(ctx.exception, ValueError)

    def test_parse_entries_skips_noise_and_malformed_lines(self):
        lines = [
            "# a comment",
            "i 2024-01-01 09:00:00 acme",
            "i 2024-01-01 nine acme",
            "",
            "o 2024-01-01 10:00:00",
        ]
        entries = list(parse_entries(lines))
        self.assertEqual([e.kind for e in entries], ["i", "o"])
        self.assertEqual([e.line_no for e in entries], [2, 5])

    def test_to_line_omits_empty_project(self):
        self.assertEqual(LogEntry("o", datetime(2024, 1, 1, 17, 0, 0)).to_line(), "o 2024-01-01 17:00:00")
        self.assertEqual(LogEntry("i", datetime(2024, 1, 1, 9, 0, 0), "acme").to_line(), "i 2024-01-01 09:00:00 acme")


class TestSessionReconstruction(unittest.TestCase):
    """Test positional pairing of clock records."""

    now = datetime(2024, 3, 1, 12, 0, 0)

    def test_session_count_is_min_of_ins_and_outs(self):
        lines = [
            "i 2024-01-01 09:00:00 a",
            "o 2024-01-01 10:00:00",
            "i 2024-01-01 11:00:00 b",
            "o 2024-01-01 12:30:00",
            "o 2024-01-01 13:00:00",
        ]
        sessions = sessions_in_range(lines, "2024-01-01", "2024-01-01", self.now)
        self.assertEqual(len(sessions), 2)
        self.assertEqual([s.hours for s in sessions], [1.0, 1.5])
        self.assertEqual([s.project for s in sessions], ["a", "b"])

    def test_pairs_by_position_not_by_meaning(self):
        lines = [
            "i 2024-01-01 09:00:00 a",
            "i 2024-01-01 10:00:00 b",
            "o 2024-01-01 11:00:00",
        ]
        sessions = sessions_in_range(lines, "2024-01-01", "2024-01-01", self.now)
        self.assertEqual(len(sessions), 1)
        self.assertEqual(sessions[0].project, "a")
        self.assertEqual(sessions[0].hours, 2.0)

    def test_non_positive_durations_are_dropped(self):
        lines = [
            "i 2024-01-01 10:00:00 a",
            "o 2024-01-01 09:00:00",
            "i 2024-01-01 11:00:00 b",
            "o 2024-01-01 11:00:00",
        ]
        self.assertEqual(sessions_in_range(lines, "2024-01-01", "2024-01-01", self.now), [])

    def test_range_filter_is_inclusive(self):
        lines = [
            "i 2023-12-31 09:00:00 a",
            "o 2023-12-31 10:00:00",
            "i 2024-01-01 09:00:00 b",
            "o 2024-01-01 10:00:00",
            "i 2024-01-02 09:00:00 c",
            "o 2024-01-02 10:00:00",
        ]
        sessions = sessions_in_range(lines, "2024-01-01", "2024-01-02", self.now)
        self.assertEqual([s.project for s in sessions], ["b", "c"])

    def test_open_session_closed_at_now(self):
        lines = ["i 2024-01-01 09:00:00 acme"]
        now = datetime(2024, 1, 1, 11, 30, 0)
        sessions = sessions_in_range(lines, "2024-01-01", "2024-01-01", now)
        self.assertEqual(len(sessions), 1)
        self.assertTrue(sessions[0].is_open)
        self.assertAlmostEqual(sessions[0].hours, 2.5)

    def test_open_session_ignored_when_today_outside_range(self):
        lines = ["i 2024-01-01 09:00:00 acme"]
        now = datetime(2024, 1, 2, 11, 30, 0)
        self.assertEqual(sessions_in_range(lines, "2024-01-01", "2024-01-01", now), [])

    def test_open_session_needs_exactly_one_surplus_in(self):
        lines = [
            "i 2024-01-01 08:00:00 a",
            "i 2024-01-01 09:00:00 b",
        ]
        now = datetime(2024, 1, 1, 11, 0, 0)
        self.assertEqual(sessions_in_range(lines, "2024-01-01", "2024-01-01", now), [])

    def test_clock_state_queries(self):
        lines = [
            "i 2024-01-01 09:00:00 acme:backend",
            "o 2024-01-01 10:00:00",
            "i 2024-01-01 10:00:00 beta",
            "o 2024-01-01 11:00:00 done",
            "just a note",
        ]
        self.assertEqual(last_record_kind(lines), "o")
        self.assertEqual(current_project(lines), "beta")
        self.assertEqual(last_closed_project(lines, 1), "beta")
        self.assertEqual(last_closed_project(lines, 2), "acme:backend")
        self.assertIsNone(last_record_kind(["note"]))

    def test_last_closed_project_not_found(self):
        lines = [
            "i 2024-01-01 09:00:00 a",
            "o 2024-01-01 10:00:00",
            "i 2024-01-01 10:00:00 b",
            "o 2024-01-01 11:00:00",
        ]
        with self.assertRaises(NotFoundError):
            last_closed_project(lines, 3)
        with self.assertRaises(NotFoundError):
            last_closed_project(lines, 0)
        with self.assertRaises(NotFoundError):
            last_closed_project(["o 2024-01-01 11:00:00"], 1)

    def test_current_project_not_found(self):
        with self.assertRaises(NotFoundError):
            current_project(["o 2024-01-01 11:00:00"])

    def test_recent_projects_most_recent_first_and_distinct(self):
        lines = [
            "i 2024-01-01 09:00:00 a",
            "o 2024-01-01 10:00:00",
            "i 2024-01-01 10:00:00 b",
            "o 2024-01-01 11:00:00",
            "i 2024-01-01 11:00:00 a",
            "o 2024-01-01 12:00:00",
            "i 2024-01-01 12:00:00 c",
        ]
        self.assertEqual(recent_projects(lines), ["c", "a", "b"])
        self.assertEqual(recent_projects(lines, limit=2), ["c", "a"])


class TestProjectTotals(unittest.TestCase):
    """Test hierarchical aggregation."""

    def _sessions(self, *specs):
        lines = []
        for idx, (project, hours) in enumerate(specs):
            lines.append(f"i 2024-01-01 {idx:02}:00:00 {project}")
            lines.append(f"o 2024-01-01 {idx:02}:{int(hours * 60):02}:00")
        return sessions_in_range(lines, "2024-01-01", "2024-01-01", datetime(2024, 3, 1))

    def test_three_levels(self):
        totals = ProjectTotals(self._sessions(("acme:backend:api", 0.5), ("acme:backend", 0.25), ("acme", 0.25), ("beta", 0.5)))
        self.assertEqual(totals.projects, {"acme": 1.0, "beta": 0.5})
        self.assertEqual(totals.sub_projects, {"acme": {"backend": 0.75}})
        self.assertEqual(totals.sub_paths, {"backend": {"api": 0.5}})
        self.assertEqual(totals.project_paths["acme"], {"acme:backend:api": 0.5, "acme:backend": 0.25, "acme": 0.25})
        self.assertEqual(totals.total, 1.5)

    def test_sub_paths_keyed_by_sub_project_name_only(self):
        totals = ProjectTotals(self._sessions(("acme:api:v1", 0.25), ("beta:api:v2", 0.5)))
        self.assertEqual(totals.sub_paths, {"api": {"v1": 0.25, "v2": 0.5}})
        self.assertEqual(totals.sub_projects, {"acme": {"api": 0.25}, "beta": {"api": 0.5}})

    def test_rows_are_nested_and_sorted(self):
        totals = ProjectTotals(self._sessions(("small", 0.25), ("big:sub:leaf", 0.5)))
        self.assertEqual(totals.rows(), [
            ["big", "", "", 0.5],
            ["", "sub", "", 0.5],
            ["", "", "leaf", 0.5],
            ["small", "", "", 0.25],
        ])


class TestDateRanges(unittest.TestCase):
    """Test named date ranges."""

    def test_day_range(self):
        today = datetime(2024, 1, 3).date()
        self.assertEqual(get_day_range(today), (today, today))
        self.assertEqual(get_day_range(today, 3)[0].isoformat(), "2023-12-31")

    def test_get_week_range_starts_monday(self):
        start, end = get_week_range(datetime(2024, 1, 7).date())
        self.assertEqual((start.isoformat(), end.isoformat()), ("2024-01-01", "2024-01-07"))

    def test_week_range_monday_to_sunday(self):
        wednesday = datetime(2024, 1, 3).date()
        sunday = datetime(2024, 1, 7).date()
        for today in (wednesday, sunday):
            with self.subTest(today=today):
                start, end = get_weeks_ago_range(today)
                self.assertEqual((start.isoformat(), end.isoformat()), ("2024-01-01", "2024-01-07"))
        start, end = get_weeks_ago_range(wednesday, 1)
        self.assertEqual((start.isoformat(), end.isoformat()), ("2023-12-25", "2023-12-31"))


class TestTimelogHours(TimelogTestCase):
    """Test hours queries on a timelog file."""

    def test_single_day_scenario(self):
        self.write_log("i 2024-01-01 09:00:00 acme:backend", "o 2024-01-01 17:00:00")
        report = self.timelog.hours_for("2024-01-01", "2024-01-01")
        self.assertEqual(report.total, 8.0)
        self.assertIsNone(report.project_totals)

        grouped = self.timelog.hours_for("2024-01-01", "2024-01-01", group=True)
        self.assertEqual(grouped.total, 8.0)
        self.assertEqual(grouped.project_totals, {"acme": 8.0})
        self.assertEqual(grouped.hierarchical_totals, {"acme": {"backend": 8.0}})
        self.assertEqual(len(grouped.sessions), 1)

    def test_hours_today_includes_running_session(self):
        self.write_log("i 2024-01-01 09:00:00 acme")
        report = self.timelog.hours_today()
        self.assertAlmostEqual(report.total, 2.5)
        self.assertTrue(report.sessions[0].is_open)

    def test_hours_for_past_day_and_week(self):
        self.clock.current = datetime(2024, 1, 3, 12, 0, 0)
        self.write_log(
            "i 2023-12-29 09:00:00 old",
            "o 2023-12-29 10:00:00",
            "i 2024-01-01 09:00:00 a",
            "o 2024-01-01 11:00:00",
            "i 2024-01-02 09:00:00 b",
            "o 2024-01-02 12:00:00",
        )
        self.assertEqual(self.timelog.hours_for_day(1).total, 3.0)
        self.assertEqual(self.timelog.hours_for_day(2).total, 2.0)
        self.assertEqual(self.timelog.hours_today().total, 0)
        self.assertEqual(self.timelog.hours_this_week().total, 5.0)
        self.assertEqual(self.timelog.hours_for_week(1).total, 1.0)

    def test_queries_are_idempotent(self):
        self.write_log("i 2024-01-01 09:00:00 acme", "o 2024-01-01 10:00:00", "i 2024-01-01 10:30:00 beta")
        first = (self.timelog.hours_today(group=True).project_totals, self.timelog.current_project(), self.timelog.cat_entries())
        second = (self.timelog.hours_today(group=True).project_totals, self.timelog.current_project(), self.timelog.cat_entries())
        self.assertEqual(first, second)

    def test_undecodable_bytes_do_not_stop_queries(self):
        with open(self.path, "wb") as f:
            f.write(b"i 2024-01-01 09:00:00 acme\n\xff\xfe note\no 2024-01-01 17:00:00\n")
        self.clock.current = datetime(2024, 1, 1, 18, 0, 0)
        self.assertEqual(self.timelog.hours_today().total, 8.0)
        self.assertEqual(self.timelog.current_project(), "acme")
        self.assertEqual(self.timelog.validate(), [])

    def test_missing_file_raises_oserror(self):
        with self.assertRaises(OSError):
            self.timelog.hours_today()
        with self.assertRaises(OSError):
            self.timelog.current_project()


class TestTimelogClock(TimelogTestCase):
    """Test the clock-in / clock-out state machine."""

    def test_round_trip_hours(self):
        self.clock.current = datetime(2024, 1, 1, 9, 0, 0)
        self.timelog.clock_in("acme:backend")
        self.clock.current = datetime(2024, 1, 1, 10, 15, 0)
        self.timelog.clock_out()
        self.assertEqual(self.read_log(), ["i 2024-01-01 09:00:00 acme:backend", "o 2024-01-01 10:15:00"])
        self.assertAlmostEqual(self.timelog.hours_today().total, 1.25)

    def test_clock_in_twice_fails_without_writing(self):
        self.timelog.clock_in("acme")
        with self.assertRaises(StateError):
            self.timelog.clock_in("acme")
        self.assertEqual(len(self.read_log()), 1)

    def test_clock_out_when_out_fails(self):
        with self.assertRaises(StateError):
            self.timelog.clock_out()
        self.assertFalse(os.path.exists(self.path))

    def test_clock_out_keeps_trailing_text(self):
        self.timelog.clock_in("acme")
        self.assertEqual(self.timelog.clock_out("wrapped up"), "o 2024-01-01 11:30:00 wrapped up")

    def test_switch_writes_out_and_in(self):
        self.timelog.clock_in("acme")
        self.clock.current = datetime(2024, 1, 1, 12, 0, 0)
        self.timelog.switch_project("beta")
        self.assertEqual(self.read_log(), [
            "i 2024-01-01 11:30:00 acme",
            "o 2024-01-01 12:00:00",
            "i 2024-01-01 12:00:00 beta",
        ])
        self.assertEqual(self.timelog.current_project(), "beta")
        self.assertEqual(self.timelog.last_closed_project(), "acme")

    def test_switch_rejections(self):
        with self.assertRaises(StateError):
            self.timelog.switch_project("beta")
        self.timelog.clock_in("acme")
        with self.assertRaises(StateError):
            self.timelog.switch_project("acme")
        self.assertEqual(len(self.read_log()), 1)

    def test_line_breaks_in_project_are_rejected(self):
        for text in ("acme\no 2024-01-01 09:30:00", "acme\rbeta"):
            with self.subTest(text=text):
                with self.assertRaises(TimelogError):
                    self.timelog.clock_in(text)
                self.assertFalse(os.path.exists(self.path))

        self.timelog.clock_in("acme")
        with self.assertRaises(TimelogError):
            self.timelog.clock_out("done\ni 2024-01-01 12:00:00 beta")
        with self.assertRaises(TimelogError):
            self.timelog.switch_project("beta\no 2024-01-01 12:00:00")
        self.assertEqual(self.read_log(), ["i 2024-01-01 11:30:00 acme"])
        self.assertTrue(self.timelog.is_clocked_in())

    def test_current_project_survives_clock_out(self):
        self.timelog.clock_in("acme")
        self.timelog.clock_out()
        self.assertEqual(self.timelog.current_project(), "acme")
        self.assertFalse(self.timelog.is_clocked_in())


class TestTimelogExcerpts(TimelogTestCase):
    """Test cat / ins excerpts and validation."""

    def setUp(self):
        super().setUp()
        self.write_log(
            "i 2024-01-01 09:00:00 a",
            "o 2024-01-01 10:00:00",
            "i 2024-01-02 09:00:00 b",
            "o 2024-01-02 10:00:00",
            "",
            "x",
            "i 2024-01-03 09:00:00 c",
            "o 2024-01-03 10:00:00",
        )

    def test_cat_last_day(self):
        self.assertEqual(self.timelog.cat_entries(days=1), ["i 2024-01-03 09:00:00 c", "o 2024-01-03 10:00:00"])

    def test_cat_clamps_days(self):
        self.assertEqual(len(self.timelog.cat_entries(days=10)), 6)
        self.assertEqual(self.timelog.cat_entries(days=0), [])

    def test_ins_only(self):
        self.assertEqual(self.timelog.cat_entries(only_in=True, days=2), ["i 2024-01-02 09:00:00 b", "i 2024-01-03 09:00:00 c"])

    def test_validate_reports_problems(self):
        self.write_log(
            "i 2024-01-01 10:00:00 a",
            "o 2024-01-01 09:00:00",
            "i bad",
            "o 2024-13-01 10:00:00",
            "some note",
            "i 2024-01-01 11:00:00 b",
        )
        warnings = self.timelog.validate()
        self.assertEqual([w.line_no for w in warnings], [2, 3, 4])
        self.assertIn("before previous entry (2024-01-01 10:00:00)", str(warnings[0]))
        self.assertIn("malformed", warnings[1].message)
        self.assertIn("invalid time", warnings[2].message)

    def test_validate_clean_file(self):
        self.assertEqual(self.timelog.validate(), [])


if __name__ == '__main__':
    unittest.main()
