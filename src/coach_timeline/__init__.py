"""
Coach Timeline.

PURPOSE: Day-timeline scheduling and attendance aggregation for a coaching dashboard.
AI CONTEXT: Pure, stateless core plus a thin FastAPI/CLI surface over a JSON store.

PACKAGE STRUCTURE:
- intervals.py: Interval model with day-granularity and instant comparisons
- grid.py: Fixed hourly day grid (05:00-23:00 by default)
- bucketing.py: Assign sessions to the slot containing their start
- positioning.py: Pixel geometry for sessions on the timeline
- filters.py: Date-range overlap filter, past/upcoming split, challenge status
- statistics.py: Attendance aggregation by (day, time label)
- models.py: Data models (Session, AttendanceRecord, TimedChallenge)
- presenters.py: View models for the dashboard and charts
- storage.py: JSON file persistence
- filesystem.py: Injectable file access for storage
- config.py: Configuration constants
- cli.py: Command-line interface
- web/: FastAPI dashboard and JSON API

QUICK START:
    from coach_timeline.positioning import layout_day
    layout = layout_day(sessions, date(2024, 1, 1))

    from coach_timeline.statistics import AttendanceAggregator
    report = AttendanceAggregator().aggregate(sessions)

    # Launch dashboard
    python -m coach_timeline dashboard
"""

from coach_timeline.__version__ import (
    __author__,
    __copyright__,
    __description__,
    __license__,
    __title__,
    __url__,
    __version__,
    __version_date__,
)

__all__ = [
    "__version__",
    "__version_date__",
    "__title__",
    "__description__",
    "__url__",
    "__author__",
    "__license__",
    "__copyright__",
]
