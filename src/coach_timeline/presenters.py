"""
Presenters for Coach Timeline dashboards.

PURPOSE: Testable layer between the JSON store, the timeline core and the UI.
AI CONTEXT: Presenters fetch a snapshot, call the pure core, and return
view models. No HTML here, no state between calls.

DESIGN PRINCIPLES:
1. Presenters receive storage, return view models (dataclasses)
2. Every call refetches and recomputes
3. No dependency on FastAPI; routes and the CLI both use these
4. Validation failures raise ChallengeRejected, routes map it to HTTP 400

USAGE:
    presenter = DayTimelinePresenter(storage)
    view = presenter.get_day_view(date(2024, 1, 1), now=datetime.now())
    view.layout.to_dict()
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from .filters import (
    TodayWindow,
    challenge_status,
    filter_active,
    filter_active_today,
    find_conflicting_challenge,
    split_past_upcoming,
    today_time_range,
)
from .intervals import Interval, day_bounds, instant_before
from .positioning import DayLayout, PositionedSession, layout_day
from .statistics import (
    AttendanceAggregator,
    AttendanceReport,
    BucketOrder,
    format_time_label,
)

if TYPE_CHECKING:
    from .models import Session, TimedChallenge
    from .storage import StorageManager

__all__ = [
    "ChallengeRejected",
    "SessionCardViewModel",
    "SlotRowViewModel",
    "DayTimelineViewModel",
    "SessionListItem",
    "SessionListsViewModel",
    "ChartPoint",
    "AttendanceChartViewModel",
    "ChallengeViewModel",
    "DayTimelinePresenter",
    "AttendancePresenter",
    "ChallengePresenter",
    "ChartPresenter",
]

# Chart geometry used by the dashboard's SVG attendance chart
CHART_HEIGHT_PX = 400
CHART_PADDING: dict[str, int] = {"top": 40, "right": 60, "bottom": 60, "left": 80}
Y_AXIS_STEPS = 5
MAX_X_LABELS = 10

CARD_COLORS: dict[str, str] = {
    "personal": "#8b5cf6",
    "group": "#3b82f6",
    "past": "#475569",
}


class ChallengeRejected(ValueError):
    """A timed challenge failed validation (reversed dates or overlap)."""


# =============================================================================
# Day timeline
# =============================================================================


@dataclass
class SessionCardViewModel:
    """One positioned card on the day view."""

    session_id: str
    title: str
    kind: str
    start_at: datetime
    end_at: datetime
    top: float
    height: float
    attending_count: int
    attendees_confirmed: bool
    is_past: bool

    @property
    def time_range_display(self) -> str:
        """
        Format the card's time range.

        Returns:
            String like "8:45 AM - 10:15 AM".

        Example:
            >>> card.time_range_display
            '8:45 AM - 10:15 AM'
        """
        return f"{format_time_label(self.start_at)} - {format_time_label(self.end_at)}"

    @property
    def color(self) -> str:
        """Card background: dimmed once past, else by kind."""
        if self.is_past:
            return CARD_COLORS["past"]
        return CARD_COLORS.get(self.kind, CARD_COLORS["group"])

    @classmethod
    def from_positioned(cls, card: PositionedSession, now: datetime) -> SessionCardViewModel:
        session = card.session
        return cls(
            session_id=session.id,
            title=session.display_title,
            kind=session.kind,
            start_at=session.start_at,
            end_at=session.effective_end,
            top=card.top,
            height=card.height,
            attending_count=session.attending_count,
            attendees_confirmed=session.attendees_confirmed,
            is_past=instant_before(session.interval.end, now),
        )


@dataclass
class SlotRowViewModel:
    """One hour row of the day view."""

    label: str
    hour_index: int
    is_past: bool
    session_count: int


@dataclass
class DayTimelineViewModel:
    """Complete view model for the day timeline page."""

    day: date
    layout: DayLayout
    rows: list[SlotRowViewModel] = field(default_factory=list)
    cards: list[SessionCardViewModel] = field(default_factory=list)

    @property
    def day_display(self) -> str:
        """Heading like 'Monday, January 1, 2024'."""
        return f"{self.day.strftime('%A, %B')} {self.day.day}, {self.day.year}"

    @property
    def canvas_height(self) -> float:
        return self.layout.canvas_height

    @property
    def is_empty(self) -> bool:
        return not self.cards


@dataclass
class SessionListItem:
    """Session row for the today/upcoming/past lists."""

    session: Session
    today_window: TodayWindow | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.session.id,
            "title": self.session.display_title,
            "kind": self.session.kind,
            "start_at": self.session.start_at.isoformat(),
            "end_at": self.session.effective_end.isoformat(),
            "location_name": self.session.location_name,
            "attending_count": self.session.attending_count,
        }
        if self.today_window is not None:
            data["today_start"] = self.today_window.start.isoformat()
            data["today_end"] = self.today_window.end.isoformat()
            data["is_multi_day"] = self.today_window.is_multi_day
        return data


@dataclass
class SessionListsViewModel:
    """Sessions categorized relative to now."""

    today: list[SessionListItem] = field(default_factory=list)
    upcoming: list[SessionListItem] = field(default_factory=list)
    past: list[SessionListItem] = field(default_factory=list)

    def view(self, name: str) -> list[SessionListItem]:
        """
        Select one list by name.

        Raises:
            ValueError: If name is not 'today', 'upcoming' or 'past'.
        """
        if name not in ("today", "upcoming", "past"):
            raise ValueError(f"Unknown session view: {name!r}")
        items: list[SessionListItem] = getattr(self, name)
        return items


class DayTimelinePresenter:
    """
    Presenter for the coach's day schedule and session lists.

    Every call refetches from storage and rebuilds the layout.
    """

    def __init__(self, storage: StorageManager) -> None:
        """
        Initialize with the data source.

        Args:
            storage: StorageManager providing session snapshots.
        """
        self.storage = storage

    def _sessions_for_day(self, day: date, include_out_of_window: bool) -> list[Session]:
        if include_out_of_window:
            return filter_active(self.storage.load_sessions(), Interval.for_day(day))
        lo, hi = day_bounds(day)
        return self.storage.query_sessions(start=lo, end=hi)

    def get_day_view(
        self,
        day: date,
        now: datetime,
        include_out_of_window: bool = False,
    ) -> DayTimelineViewModel:
        """
        Build the day timeline view model.

        Business context: Coaches open the schedule to see what is booked
        today, hour by hour, with each PT client's name on the card. Rows
        that have started are dimmed so the next slot stands out.

        Args:
            day: Day to show.
            now: Current instant, for dimming past rows and cards.
            include_out_of_window: Also position sessions that are active
                on the day but start outside the grid hours (or on an
                earlier day).

        Returns:
            DayTimelineViewModel with rows for every grid hour and one
            card per positioned session.

        Example:
            >>> view = presenter.get_day_view(date(2024, 1, 1), now)
            >>> [row.label for row in view.rows][:2]
            ['5 AM', '6 AM']
        """
        sessions = self._sessions_for_day(day, include_out_of_window)
        layout = layout_day(sessions, day, include_out_of_window=include_out_of_window)
        rows = [
            SlotRowViewModel(
                label=slot.label,
                hour_index=slot.hour_index,
                is_past=slot.is_past(now),
                session_count=len(layout.buckets.get(index, [])),
            )
            for index, slot in enumerate(layout.slots)
        ]
        cards = [SessionCardViewModel.from_positioned(card, now) for card in layout.positioned]
        return DayTimelineViewModel(day=layout.day, layout=layout, rows=rows, cards=cards)

    def get_session_lists(self, now: datetime) -> SessionListsViewModel:
        """
        Categorize all stored sessions relative to now.

        Today uses day granularity (anything touching today's date,
        clipped to today). Past and upcoming use exact instants.

        Args:
            now: Current instant.

        Returns:
            SessionListsViewModel with today (in start order), upcoming
            (next first) and past (most recent first).
        """
        sessions = self.storage.load_sessions()
        todays = sorted(filter_active_today(sessions, now), key=lambda s: s.start_at)
        past, upcoming = split_past_upcoming(sessions, now)
        return SessionListsViewModel(
            today=[SessionListItem(s, today_time_range(s, now)) for s in todays],
            upcoming=[SessionListItem(s) for s in upcoming],
            past=[SessionListItem(s) for s in past],
        )


# =============================================================================
# Attendance
# =============================================================================


@dataclass
class ChartPoint:
    """Attendance bucket mapped onto chart coordinates."""

    x: float
    y: float
    value: int
    label: str
    show_label: bool


@dataclass
class AttendanceChartViewModel:
    """Attendance report plus line-chart geometry."""

    report: AttendanceReport
    width: float
    height: float
    points: list[ChartPoint] = field(default_factory=list)
    y_axis_labels: list[int] = field(default_factory=list)
    y_axis_positions: list[float] = field(default_factory=list)
    average_y: float = 0.0

    @property
    def plot_left(self) -> float:
        return float(CHART_PADDING["left"])

    @property
    def plot_right(self) -> float:
        return self.width - CHART_PADDING["right"]

    @property
    def plot_top(self) -> float:
        return float(CHART_PADDING["top"])

    @property
    def plot_bottom(self) -> float:
        return self.height - CHART_PADDING["bottom"]

    @property
    def y_axis_ticks(self) -> list[tuple[int, float]]:
        """Pairs of (label, y) for the horizontal grid lines."""
        return list(zip(self.y_axis_labels, self.y_axis_positions))

    @property
    def average_display(self) -> str:
        return f"Avg: {self.report.summary.average_attendance:.1f}"

    @property
    def polyline(self) -> str:
        """SVG points attribute, e.g. '80.0,300.0 940.0,40.0'."""
        return " ".join(f"{p.x:.1f},{p.y:.1f}" for p in self.points)


class AttendancePresenter:
    """
    Presenter for class attendance trends.

    Wraps AttendanceAggregator and maps its buckets onto the dashboard's
    line chart: x spreads buckets evenly, y is normalized between the
    smallest and largest bucket total (floor 0, ceiling at least 1).
    """

    def __init__(
        self,
        storage: StorageManager,
        aggregator: AttendanceAggregator,
    ) -> None:
        self.storage = storage
        self.aggregator = aggregator

    def get_report(
        self,
        kind: str | None = None,
        order: str = BucketOrder.LABEL,
    ) -> AttendanceReport:
        """
        Aggregate attendance for stored sessions.

        Args:
            kind: SessionKind to restrict to. None for all sessions.
            order: BucketOrder name.

        Returns:
            AttendanceReport.

        Raises:
            ValueError: If order is unknown.
        """
        sessions = self.storage.query_sessions(kind=kind)
        return self.aggregator.aggregate(sessions, order=order)

    def get_chart(
        self,
        kind: str | None = None,
        order: str = BucketOrder.LABEL,
        width: float = 1000.0,
    ) -> AttendanceChartViewModel:
        """
        Build chart geometry for the attendance trend.

        Business context: The chart shows whether a recurring class is
        filling up or emptying out; the dashed average line gives the
        baseline.

        Args:
            kind: SessionKind to restrict to.
            order: BucketOrder name.
            width: Chart width in px.

        Returns:
            AttendanceChartViewModel with one point per bucket, six
            y-axis labels and the average line position.

        Example:
            >>> chart = presenter.get_chart(width=1000)
            >>> chart.points[0].x
            80.0
        """
        report = self.get_report(kind=kind, order=order)
        return self.build_chart(report, width=width)

    def build_chart(
        self,
        report: AttendanceReport,
        width: float = 1000.0,
        height: float = CHART_HEIGHT_PX,
    ) -> AttendanceChartViewModel:
        """Map a report onto chart coordinates. Pure."""
        totals = [bucket.total_attendance for bucket in report.buckets]
        max_value = max([*totals, 1])
        min_value = min([*totals, 0])
        value_range = (max_value - min_value) or 1

        graph_width = width - CHART_PADDING["left"] - CHART_PADDING["right"]
        graph_height = height - CHART_PADDING["top"] - CHART_PADDING["bottom"]
        x_divisor = (len(totals) - 1) or 1
        label_interval = max(1, len(totals) // MAX_X_LABELS)

        def y_for(value: float) -> float:
            normalized = (value - min_value) / value_range
            return CHART_PADDING["top"] + graph_height - normalized * graph_height

        points = [
            ChartPoint(
                x=CHART_PADDING["left"] + (index / x_divisor) * graph_width,
                y=y_for(bucket.total_attendance),
                value=bucket.total_attendance,
                label=f"{bucket.weekday[:3]} {bucket.day_key.day} {bucket.time_label}",
                show_label=index % label_interval == 0 or index == len(totals) - 1,
            )
            for index, bucket in enumerate(report.buckets)
        ]
        y_axis_labels = [
            round(min_value + (value_range / Y_AXIS_STEPS) * step)
            for step in range(Y_AXIS_STEPS + 1)
        ]
        y_axis_positions = [
            CHART_PADDING["top"] + graph_height - (step / Y_AXIS_STEPS) * graph_height
            for step in range(Y_AXIS_STEPS + 1)
        ]
        return AttendanceChartViewModel(
            report=report,
            width=width,
            height=height,
            points=points,
            y_axis_labels=y_axis_labels,
            y_axis_positions=y_axis_positions,
            average_y=y_for(report.summary.average_attendance),
        )


# =============================================================================
# Timed challenges
# =============================================================================


@dataclass
class ChallengeViewModel:
    """Timed challenge with its lifecycle status."""

    challenge: TimedChallenge
    status: str

    def to_dict(self) -> dict[str, Any]:
        return {**self.challenge.to_dict(), "status": self.status}


class ChallengePresenter:
    """Presenter for listing and creating timed challenges."""

    def __init__(self, storage: StorageManager) -> None:
        self.storage = storage

    def list_challenges(
        self,
        start_date: date,
        end_date: date,
        today: date,
    ) -> list[ChallengeViewModel]:
        """
        List timed challenges active in a date range.

        Uses the same whole-day overlap as the day view's "active today"
        filter, so a challenge ending on start_date is included.

        Args:
            start_date: First day of the range.
            end_date: Last day of the range, inclusive.
            today: Reference day for status.

        Returns:
            Matching challenges ordered by start date, each with status.
        """
        query_range = Interval.for_days(start_date, end_date)
        active = filter_active(self.storage.load_challenges(), query_range)
        active.sort(key=lambda c: c.start_date)
        return [ChallengeViewModel(c, challenge_status(c, today)) for c in active]

    def create_challenge(self, challenge: TimedChallenge, today: date) -> ChallengeViewModel:
        """
        Validate and store a new timed challenge.

        Business context: Only one timed challenge runs at a time, so the
        leaderboard always has a single current event.

        Args:
            challenge: Challenge to create.
            today: Reference day for the returned status.

        Returns:
            ChallengeViewModel of the stored challenge.

        Raises:
            ChallengeRejected: If end_date is before start_date, the id is
                already taken, the window overlaps an existing challenge,
                or the write fails.
        """
        if challenge.end_date < challenge.start_date:
            raise ChallengeRejected("End date must be after start date")

        existing = self.storage.load_challenges()
        if any(other.id == challenge.id for other in existing):
            raise ChallengeRejected(f"Timed challenge {challenge.id!r} already exists")

        conflict = find_conflicting_challenge(challenge, existing)
        if conflict is not None:
            raise ChallengeRejected(
                f"Overlaps existing timed challenge '{conflict.title}' "
                f"({conflict.start_date.isoformat()} to {conflict.end_date.isoformat()})"
            )

        if not self.storage.add_challenge(challenge):
            raise ChallengeRejected("Failed to save timed challenge")
        return ChallengeViewModel(challenge, challenge_status(challenge, today))


# =============================================================================
# Charts
# =============================================================================


class ChartPresenter:
    """
    Presenter for server-side chart images.

    Uses matplotlib (lazy-imported) and returns PNG bytes.
    """

    def __init__(
        self,
        storage: StorageManager,
        aggregator: AttendanceAggregator,
    ) -> None:
        self.storage = storage
        self.aggregator = aggregator

    def _render_empty(self) -> Any:
        """Placeholder figure when there is no attendance data."""
        import matplotlib.pyplot as plt

        fig, ax = plt.subplots(figsize=(8, 3))
        ax.text(0.5, 0.5, "No attendance data yet", ha="center", va="center", fontsize=14)
        ax.set_xlim(0, 1)
        ax.set_ylim(0, 1)
        ax.axis("off")
        return fig, ax

    def render_attendance_chart(
        self,
        kind: str | None = None,
        order: str = BucketOrder.LABEL,
    ) -> bytes:
        """
        Render the attendance trend as a line chart PNG.

        One point per (day, time) bucket in report order, with a dashed
        line at the average attendance per session.

        Args:
            kind: SessionKind to restrict to.
            order: BucketOrder name.

        Returns:
            PNG image bytes. Shows placeholder text when there is no data.

        Raises:
            ImportError: If matplotlib is not installed. Caller should
                catch this and serve a placeholder.
            ValueError: If order is unknown.

        Example:
            >>> try:
            ...     png = presenter.render_attendance_chart()
            ... except ImportError:
            ...     png = None
        """
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        report = self.aggregator.aggregate(self.storage.query_sessions(kind=kind), order=order)

        if not report.buckets:
            fig, _ax = self._render_empty()
        else:
            fig, ax = plt.subplots(figsize=(10, 4))
            totals = [bucket.total_attendance for bucket in report.buckets]
            positions = list(range(len(totals)))
            ax.plot(positions, totals, marker="o", color=CARD_COLORS["group"])
            ax.axhline(
                report.summary.average_attendance,
                linestyle="--",
                color="#94a3b8",
                linewidth=1,
                label=f"Avg: {report.summary.average_attendance:.1f}",
            )
            label_interval = max(1, len(totals) // MAX_X_LABELS)
            ax.set_xticks(positions[::label_interval])
            ax.set_xticklabels(
                [
                    f"{b.weekday[:3]} {b.day_key.day}\n{b.time_label}"
                    for b in report.buckets[::label_interval]
                ],
                rotation=45,
                ha="right",
            )
            ax.set_ylabel("Attendance")
            ax.set_ylim(bottom=0)
            ax.set_title("Class Attendance")
            ax.legend(loc="upper right")
            ax.spines["top"].set_visible(False)
            ax.spines["right"].set_visible(False)

        buf = io.BytesIO()
        plt.tight_layout()
        plt.savefig(buf, format="png", dpi=100, bbox_inches="tight")
        plt.close(fig)
        buf.seek(0)
        return buf.read()
