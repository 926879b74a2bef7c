"""
CLI entry point for Coach Timeline.

PURPOSE: Command-line interface for the dashboard and text reports.
AI CONTEXT: Main entry points for package execution.

USAGE:
    python -m coach_timeline dashboard

    # Or via CLI command (after install)
    coach-timeline dashboard --port 8080    # Launch web dashboard
    coach-timeline report                   # Attendance report
    coach-timeline timeline --day 2024-01-01
    coach-timeline challenges --start 2024-01-01 --end 2024-01-07
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, datetime
from functools import lru_cache
from typing import TYPE_CHECKING

from .statistics import BucketOrder

if TYPE_CHECKING:
    from .statistics import AttendanceAggregator
    from .storage import StorageManager

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


@lru_cache(maxsize=1)
def _get_logger() -> logging.Logger:
    """Get module logger (cached for thread safety)."""
    logging.basicConfig(level=logging.INFO)
    return logging.getLogger(__name__)


def _log(message: str, *, emoji: str = "") -> None:
    """Log message with optional emoji prefix for CLI output."""
    prefix = f"{emoji} " if emoji else ""
    _get_logger().info(f"{prefix}{message}")


def run_dashboard(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """
    Launch the web dashboard.

    Business context: Front-desk screens and coaches' laptops open the
    dashboard to see today's schedule; bind to 0.0.0.0 to share it on
    the gym network.

    Args:
        host: Network interface to bind to. Default '127.0.0.1'.
        port: TCP port for the HTTP server. Default 8000.

    Raises:
        OSError: If port is already in use.

    Example:
        >>> run_dashboard(port=3000)
        🚀 Starting dashboard at http://127.0.0.1:3000
    """
    from .web import run_dashboard as start_web

    _log(f"Starting dashboard at http://{host}:{port}", emoji="🚀")
    _log("Press Ctrl+C to stop")
    start_web(host=host, port=port)


def run_report(
    storage: StorageManager | None = None,
    aggregator: AttendanceAggregator | None = None,
    kind: str | None = None,
    order: str = BucketOrder.LABEL,
) -> None:
    """
    Print the attendance report to stdout.

    Args:
        storage: Optional StorageManager for testability.
        aggregator: Optional AttendanceAggregator for testability.
        kind: SessionKind to restrict to. None for all sessions.
        order: BucketOrder name.

    Example:
        >>> # coach-timeline report --kind group > attendance.txt
        >>> run_report(kind="group")
        ==================================================
        ATTENDANCE REPORT
        ...
    """
    from .statistics import AttendanceAggregator as Aggregator
    from .storage import StorageManager as StorageMgr

    storage = storage or StorageMgr()
    aggregator = aggregator or Aggregator()

    report = aggregator.aggregate(storage.query_sessions(kind=kind), order=order)
    # print() for stdout piping
    print(aggregator.generate_summary_report(report))


def run_timeline(
    day: date | None = None,
    storage: StorageManager | None = None,
    now: datetime | None = None,
) -> None:
    """
    Print the day schedule as text, one line per hour row.

    Past rows are marked with '·', sessions are listed under the row
    they start in with their time range and attendance.

    Args:
        day: Day to show. Default: today.
        storage: Optional StorageManager for testability.
        now: Current instant. Default: datetime.now().

    Example:
        >>> run_timeline(date(2024, 1, 1))
        Monday, January 1, 2024
          5 AM
        · 8 AM   PT: Jane Doe (8:45 AM - 10:15 AM, 1 attending)
    """
    from .presenters import DayTimelinePresenter
    from .storage import StorageManager as StorageMgr

    now = now or datetime.now()
    presenter = DayTimelinePresenter(storage or StorageMgr())
    view = presenter.get_day_view(day or now.date(), now)

    cards_by_id = {card.session_id: card for card in view.cards}
    lines = [view.day_display]
    for index, row in enumerate(view.rows):
        marker = "·" if row.is_past else " "
        starting = view.layout.buckets.get(index, [])
        if not starting:
            lines.append(f"{marker} {row.label}")
            continue
        for position, session in enumerate(starting):
            card = cards_by_id[session.id]
            label = row.label if position == 0 else ""
            lines.append(
                f"{marker} {label:<6} {card.title} "
                f"({card.time_range_display}, {card.attending_count} attending)"
            )
    if view.is_empty:
        lines.append("No sessions scheduled")
    print("\n".join(lines))


def run_challenges(
    start: date,
    end: date,
    storage: StorageManager | None = None,
    today: date | None = None,
) -> int:
    """
    Print timed challenges active between two dates.

    Args:
        start: First day of the range.
        end: Last day of the range, inclusive.
        storage: Optional StorageManager for testability.
        today: Reference day for status. Default: today.

    Returns:
        0 on success, 1 when end is before start.
    """
    from .presenters import ChallengePresenter
    from .storage import StorageManager as StorageMgr

    if end < start:
        _log(f"--end {end.isoformat()} is before --start {start.isoformat()}", emoji="❌")
        return 1

    presenter = ChallengePresenter(storage or StorageMgr())
    items = presenter.list_challenges(start, end, today=today or date.today())
    if not items:
        print(f"No timed challenges between {start.isoformat()} and {end.isoformat()}")
        return 0
    for item in items:
        c = item.challenge
        print(
            f"[{item.status:<8}] {c.start_date.isoformat()} - {c.end_date.isoformat()}  "
            f"{c.title}" + (f" ({c.challenge_type})" if c.challenge_type else "")
        )
    return 0


def main() -> int:
    """
    Main CLI entry point for Coach Timeline.

    Subcommands:
    - dashboard [--host HOST] [--port PORT]: Launch web dashboard
    - report [--kind KIND] [--order ORDER]: Print attendance report
    - timeline [--day YYYY-MM-DD]: Print the day schedule
    - challenges --start YYYY-MM-DD --end YYYY-MM-DD: List timed challenges

    Returns:
        Exit code: 0 for success, 1 for invalid input or no command.

    Raises:
        SystemExit: On --help or argument parsing errors.

    Example:
        >>> # coach-timeline dashboard --port 8080
        >>> sys.exit(main())
    """
    from .__version__ import __version__

    parser = argparse.ArgumentParser(
        prog="coach-timeline",
        description="Coach Timeline - day schedule, attendance and timed challenges",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    dashboard_parser = subparsers.add_parser("dashboard", help="Launch web dashboard")
    dashboard_parser.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help=f"Bind address (default: {DEFAULT_HOST})",
    )
    dashboard_parser.add_argument(
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help=f"Port number (default: {DEFAULT_PORT})",
    )

    report_parser = subparsers.add_parser("report", help="Print attendance report to stdout")
    report_parser.add_argument(
        "--kind",
        choices=("personal", "group"),
        default=None,
        help="Only include this kind of session",
    )
    report_parser.add_argument(
        "--order",
        choices=sorted(BucketOrder.ALL),
        default=BucketOrder.LABEL,
        help=f"Bucket order (default: {BucketOrder.LABEL})",
    )

    timeline_parser = subparsers.add_parser("timeline", help="Print the day schedule")
    timeline_parser.add_argument(
        "--day",
        type=date.fromisoformat,
        default=None,
        help="Day as YYYY-MM-DD (default: today)",
    )

    challenges_parser = subparsers.add_parser(
        "challenges", help="List timed challenges in a date range"
    )
    challenges_parser.add_argument("--start", type=date.fromisoformat, required=True)
    challenges_parser.add_argument("--end", type=date.fromisoformat, required=True)

    args = parser.parse_args()

    if args.command == "dashboard":
        run_dashboard(host=args.host, port=args.port)
    elif args.command == "report":
        run_report(kind=args.kind, order=args.order)
    elif args.command == "timeline":
        run_timeline(day=args.day)
    elif args.command == "challenges":
        return run_challenges(args.start, args.end)
    else:
        parser.print_help()
        return 1

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
