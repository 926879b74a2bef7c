"""Tests for CLI module."""

from __future__ import annotations

import sys
from collections.abc import Callable
from datetime import date, datetime
from unittest.mock import MagicMock, patch

import pytest

from coach_timeline.cli import main, run_challenges, run_dashboard, run_report, run_timeline
from coach_timeline.models import Session, SessionKind, TimedChallenge
from coach_timeline.statistics import AttendanceAggregator
from coach_timeline.storage import StorageManager
from conftest import attendee


class TestCLIParsing:
    """Tests for CLI argument parsing and dispatch.

    Categories:
    1. Exit codes and help (2 tests)
    2. Subcommand dispatch (5 tests)
    """

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Verifies running without a subcommand shows help and fails.

        Business context:
        Exit codes enable automation; a bare invocation is a usage error.

        Arrangement:
        sys.argv with just the program name.

        Action:
        Call main().

        Assertion Strategy:
        Returns 1 and prints usage.
        """
        with patch.object(sys, "argv", ["coach-timeline"]):
            result = main()
        assert result == 1
        assert "usage: coach-timeline" in capsys.readouterr().out

    def test_version_flag(self) -> None:
        with patch.object(sys, "argv", ["coach-timeline", "--version"]):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 0

    def test_dashboard_with_host_port(self) -> None:
        with (
            patch.object(sys, "argv", ["coach-timeline", "dashboard", "--host", "0.0.0.0",
                                       "--port", "8080"]),
            patch("coach_timeline.cli.run_dashboard") as mock_run,
        ):
            assert main() == 0
        mock_run.assert_called_once_with(host="0.0.0.0", port=8080)

    def test_report_command(self) -> None:
        with (
            patch.object(sys, "argv", ["coach-timeline", "report", "--kind", "group",
                                       "--order", "chronological"]),
            patch("coach_timeline.cli.run_report") as mock_run,
        ):
            assert main() == 0
        mock_run.assert_called_once_with(kind="group", order="chronological")

    def test_timeline_command_parses_day(self) -> None:
        with (
            patch.object(sys, "argv", ["coach-timeline", "timeline", "--day", "2024-01-01"]),
            patch("coach_timeline.cli.run_timeline") as mock_run,
        ):
            assert main() == 0
        mock_run.assert_called_once_with(day=date(2024, 1, 1))

    def test_challenges_command_returns_run_result(self) -> None:
        with (
            patch.object(sys, "argv", ["coach-timeline", "challenges", "--start", "2024-01-07",
                                       "--end", "2024-01-01"]),
            patch("coach_timeline.cli.run_challenges", return_value=1) as mock_run,
        ):
            assert main() == 1
        mock_run.assert_called_once_with(date(2024, 1, 7), date(2024, 1, 1))

    def test_invalid_day_exits(self) -> None:
        with patch.object(sys, "argv", ["coach-timeline", "timeline", "--day", "tomorrow"]):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 2


class TestRunDashboard:
    """Tests for run_dashboard."""

    def test_run_dashboard_calls_web_module(self) -> None:
        pytest.importorskip("fastapi")
        with patch("coach_timeline.web.run_dashboard") as mock_web:
            run_dashboard(host="0.0.0.0", port=3000)
        mock_web.assert_called_once_with(host="0.0.0.0", port=3000)


class TestRunReport:
    """Tests for run_report."""

    def test_run_report_with_injected_dependencies(
        self,
        storage: StorageManager,
        make_session: Callable[..., Session],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        storage.save_sessions(
            [
                make_session(datetime(2024, 1, 1, 9), attending=3),
                make_session(datetime(2024, 1, 1, 7), kind=SessionKind.PERSONAL, attending=1),
            ]
        )
        run_report(storage=storage, aggregator=AttendanceAggregator(), kind=SessionKind.GROUP)
        out = capsys.readouterr().out
        assert "ATTENDANCE REPORT" in out
        assert "Sessions:            1" in out
        assert "Total attendance:    3" in out

    def test_run_report_passes_order(self) -> None:
        mock_storage = MagicMock(spec=StorageManager)
        mock_storage.query_sessions.return_value = []
        aggregator = MagicMock(spec=AttendanceAggregator)
        aggregator.generate_summary_report.return_value = "report"

        run_report(storage=mock_storage, aggregator=aggregator, order="chronological")

        mock_storage.query_sessions.assert_called_once_with(kind=None)
        aggregator.aggregate.assert_called_once_with([], order="chronological")


class TestRunTimeline:
    """Tests for run_timeline text output."""

    def test_prints_rows_and_sessions(
        self,
        storage: StorageManager,
        make_session: Callable[..., Session],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Verifies the text schedule lists sessions under their start row.

        Arrangement:
        PT session 08:45-10:15 for Jane Doe, printed at 09:30.

        Action:
        run_timeline for the day.

        Assertion Strategy:
        Heading first, started rows marked, the session on the 8 AM row
        with its time range and attendance.
        """
        storage.save_sessions(
            [
                make_session(
                    datetime(2024, 1, 1, 8, 45),
                    datetime(2024, 1, 1, 10, 15),
                    kind=SessionKind.PERSONAL,
                    attendance=[attendee("u1", first_name="Jane", last_name="Doe")],
                )
            ]
        )
        run_timeline(date(2024, 1, 1), storage=storage, now=datetime(2024, 1, 1, 9, 30))
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "Monday, January 1, 2024"
        assert lines[1] == "· 5 AM"
        assert "· 8 AM   PT: Jane Doe (8:45 AM - 10:15 AM, 1 attending)" in lines
        assert "  10 AM" in lines
        assert "No sessions scheduled" not in lines

    def test_empty_day(
        self, storage: StorageManager, capsys: pytest.CaptureFixture[str]
    ) -> None:
        run_timeline(date(2024, 1, 1), storage=storage, now=datetime(2023, 12, 31, 12))
        out = capsys.readouterr().out
        assert out.rstrip().endswith("No sessions scheduled")
        assert "·" not in out


class TestRunChallenges:
    """Tests for run_challenges."""

    def test_lists_challenges_with_status(
        self,
        storage: StorageManager,
        make_challenge: Callable[..., TimedChallenge],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        storage.save_challenges([make_challenge(date(2024, 1, 1), date(2024, 1, 7))])
        code = run_challenges(
            date(2024, 1, 1), date(2024, 1, 31), storage=storage, today=date(2024, 1, 3)
        )
        assert code == 0
        assert capsys.readouterr().out.strip() == (
            "[active  ] 2024-01-01 - 2024-01-07  Row 2k (time)"
        )

    def test_no_challenges(
        self, storage: StorageManager, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert run_challenges(date(2024, 1, 1), date(2024, 1, 7), storage=storage) == 0
        assert "No timed challenges between 2024-01-01 and 2024-01-07" in capsys.readouterr().out

    def test_reversed_range_fails(self, storage: StorageManager) -> None:
        assert run_challenges(date(2024, 1, 7), date(2024, 1, 1), storage=storage) == 1
