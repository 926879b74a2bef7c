"""
Attendance statistics for Coach Timeline.

PURPOSE: Aggregate historical attendance into (day, time slot) buckets.
AI CONTEXT: Pure data processing - no visualization, no I/O.

AGGREGATION MODEL:
- Bucket key: (calendar day of start, formatted start time, e.g. "9:00 AM")
- Sessions starting at the same instant merge into one bucket
- Only 'attending' records count
- Summary: total sessions, total attendance, average per session

BUCKET ORDER:
- BucketOrder.LABEL (default): day, then the time label compared as a
  plain string. This reproduces the dashboard's historical ordering,
  which puts "10:00 AM" before "9:00 AM" and "12:00 PM" before "6:00 AM".
  Chart consumers may depend on it, so it is kept as the default.
- BucketOrder.CHRONOLOGICAL: day, then actual time of day.

USAGE:
    aggregator = AttendanceAggregator()
    report = aggregator.aggregate(sessions)
    report.summary.average_attendance
    report.to_dict()  # JSON for the chart layer
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any

from .config import Config
from .models import Session

__all__ = [
    "BucketOrder",
    "AttendanceBucket",
    "AttendanceSummary",
    "AttendanceReport",
    "AttendanceAggregator",
    "format_time_label",
]

logger = logging.getLogger(__name__)


def format_time_label(moment: datetime) -> str:
    """
    Format the time-of-day part of a bucket key.

    12-hour clock, hour without leading zero, two-digit minutes.

    Args:
        moment: Session start.

    Returns:
        Label like "9:00 AM" or "12:30 PM".

    Example:
        >>> format_time_label(datetime(2024, 1, 1, 18, 5))
        '6:05 PM'
    """
    period = "PM" if moment.hour >= 12 else "AM"
    display_hour = moment.hour % 12 or 12
    return f"{display_hour}:{moment.minute:02d} {period}"


class BucketOrder:
    """Sort orders for attendance buckets."""

    LABEL = "label"
    CHRONOLOGICAL = "chronological"

    ALL = frozenset({LABEL, CHRONOLOGICAL})


@dataclass
class AttendanceBucket:
    """
    Sessions sharing a (day, time label) key.

    Attributes:
        day_key: Calendar day the sessions start on.
        time_label: Formatted start time.
        start_time: Time of day of the first session seen, for
            chronological ordering.
        sessions: Member sessions in input order.
        attendance_counts: Attending count per member, aligned with sessions.
        total_attendance: Sum of attendance_counts.
    """

    day_key: date
    time_label: str
    start_time: time
    sessions: list[Session] = field(default_factory=list)
    attendance_counts: list[int] = field(default_factory=list)
    total_attendance: int = 0

    @property
    def weekday(self) -> str:
        """Weekday name of day_key, e.g. 'Monday'."""
        return self.day_key.strftime("%A")

    def add(self, session: Session, attending: int) -> None:
        self.sessions.append(session)
        self.attendance_counts.append(attending)
        self.total_attendance += attending

    def to_dict(self) -> dict[str, Any]:
        return {
            "day_key": self.day_key.isoformat(),
            "day": self.weekday,
            "time_slot": self.time_label,
            "date": datetime.combine(self.day_key, self.start_time).isoformat(),
            "total_attendance": self.total_attendance,
            "activities": [
                {
                    "id": session.id,
                    "title": session.title,
                    "start_at": session.start_at.isoformat(),
                    "end_at": session.end_at.isoformat() if session.end_at else None,
                    "location_name": session.location_name,
                    "attendance_count": count,
                }
                for session, count in zip(self.sessions, self.attendance_counts, strict=True)
            ],
        }


@dataclass
class AttendanceSummary:
    """Totals across every aggregated session."""

    total_sessions: int = 0
    total_attendance: int = 0
    average_attendance: float = 0.0

    def to_dict(self, precision: int = Config.AVERAGE_PRECISION) -> dict[str, Any]:
        """
        Serialize for JSON, rounding the average.

        Args:
            precision: Decimal places kept on average_attendance.
        """
        return {
            "total_sessions": self.total_sessions,
            "total_attendance": self.total_attendance,
            "average_attendance": round(self.average_attendance, precision),
        }


@dataclass
class AttendanceReport:
    """Aggregation output: ordered buckets plus summary."""

    buckets: list[AttendanceBucket] = field(default_factory=list)
    summary: AttendanceSummary = field(default_factory=AttendanceSummary)

    def to_dict(self) -> dict[str, Any]:
        return {
            "attendance_data": [bucket.to_dict() for bucket in self.buckets],
            "summary": self.summary.to_dict(),
        }


class AttendanceAggregator:
    """
    Calculator for attendance trends by day and time slot.

    DESIGN:
    - Stateless: Each method operates on provided data
    - Pure: No side effects, only data transformation
    - Total: Empty input gives an empty report, never an exception
    """

    def aggregate(
        self,
        sessions: Sequence[Session],
        order: str = BucketOrder.LABEL,
    ) -> AttendanceReport:
        """
        Group sessions into (day, time label) buckets and summarize.

        Business context: Coaches compare how full each recurring class
        slot is across weeks ("Monday 6:00 PM circuits keep growing").
        Two classes starting at the same minute are one data point on the
        chart; the same slot on another day is a separate point.

        Args:
            sessions: Sessions with attendance lists.
            order: BucketOrder.LABEL (default) or BucketOrder.CHRONOLOGICAL.

        Returns:
            AttendanceReport with sorted buckets and summary. Empty input
            yields no buckets and a zeroed summary.

        Raises:
            ValueError: If order is not a known BucketOrder.

        Example:
            >>> report = AttendanceAggregator().aggregate(sessions)
            >>> report.summary.total_attendance == sum(
            ...     b.total_attendance for b in report.buckets)
            True
        """
        buckets = self.group_by_day_and_time(sessions)
        ordered = self.sort_buckets(buckets, order)
        summary = self.calculate_summary(sessions)
        logger.debug(
            "Aggregated %d sessions into %d buckets", summary.total_sessions, len(ordered)
        )
        return AttendanceReport(buckets=ordered, summary=summary)

    def group_by_day_and_time(self, sessions: Iterable[Session]) -> list[AttendanceBucket]:
        """
        Build buckets keyed by (start day, formatted start time).

        Args:
            sessions: Sessions to group.

        Returns:
            Buckets in first-seen order (unsorted).
        """
        grouped: dict[tuple[date, str], AttendanceBucket] = {}
        for session in sessions:
            key = (session.start_at.date(), format_time_label(session.start_at))
            bucket = grouped.get(key)
            if bucket is None:
                bucket = AttendanceBucket(
                    day_key=key[0],
                    time_label=key[1],
                    start_time=session.start_at.time(),
                )
                grouped[key] = bucket
            bucket.add(session, session.attending_count)
        return list(grouped.values())

    def sort_buckets(
        self,
        buckets: Iterable[AttendanceBucket],
        order: str = BucketOrder.LABEL,
    ) -> list[AttendanceBucket]:
        """
        Order buckets by day, then by time label or time of day.

        BucketOrder.LABEL compares labels as strings: on one day
        "10:00 AM" sorts before "9:00 AM". BucketOrder.CHRONOLOGICAL
        compares the actual start time.

        Args:
            buckets: Buckets to sort.
            order: Sort order name.

        Returns:
            New sorted list.

        Raises:
            ValueError: If order is not a known BucketOrder.
        """
        if order == BucketOrder.LABEL:
            return sorted(buckets, key=lambda b: (b.day_key, b.time_label))
        if order == BucketOrder.CHRONOLOGICAL:
            return sorted(buckets, key=lambda b: (b.day_key, b.start_time))
        raise ValueError(f"Unknown bucket order: {order!r}")

    def calculate_summary(self, sessions: Sequence[Session]) -> AttendanceSummary:
        """
        Calculate totals and the per-session average.

        Args:
            sessions: Every aggregated session.

        Returns:
            AttendanceSummary. average_attendance is 0.0 when there are
            no sessions.

        Example:
            >>> AttendanceAggregator().calculate_summary([]).average_attendance
            0.0
        """
        total_sessions = len(sessions)
        total_attendance = sum(session.attending_count for session in sessions)
        average = total_attendance / total_sessions if total_sessions else 0.0
        return AttendanceSummary(
            total_sessions=total_sessions,
            total_attendance=total_attendance,
            average_attendance=average,
        )

    def busiest_bucket(self, buckets: Sequence[AttendanceBucket]) -> AttendanceBucket | None:
        """
        Find the bucket with the highest attendance.

        Ties go to the earliest bucket in the given order.

        Returns:
            The bucket, or None for an empty list.
        """
        if not buckets:
            return None
        return max(buckets, key=lambda b: b.total_attendance)

    def generate_summary_report(self, report: AttendanceReport) -> str:
        """
        Render an attendance report as plain text.

        Business context: The CLI prints this for a quick look at class
        occupancy without opening the dashboard.

        Args:
            report: Output of aggregate().

        Returns:
            Multi-line report string.

        Example:
            >>> print(aggregator.generate_summary_report(report))
            ==================================================
            ATTENDANCE REPORT
            ...
        """
        summary = report.summary
        lines = [
            "=" * 50,
            "ATTENDANCE REPORT",
            "=" * 50,
            "",
            f"Sessions:            {summary.total_sessions}",
            f"Total attendance:    {summary.total_attendance}",
            f"Average per session: {summary.average_attendance:.1f}",
            "",
        ]

        busiest = self.busiest_bucket(report.buckets)
        if busiest is not None:
            lines.append(
                f"Busiest slot: {busiest.weekday} {busiest.day_key.isoformat()} "
                f"{busiest.time_label} ({busiest.total_attendance} attending)"
            )
            lines.append("")

        if report.buckets:
            lines.append("BY DAY AND TIME")
            lines.append("-" * 50)
            for bucket in report.buckets:
                lines.append(
                    f"{bucket.day_key.isoformat()} {bucket.weekday[:3]} "
                    f"{bucket.time_label:>8}  {bucket.total_attendance:>4}  "
                    f"({len(bucket.sessions)} session{'s' if len(bucket.sessions) != 1 else ''})"
                )
        else:
            lines.append("No attendance data available.")

        return "\n".join(lines)
