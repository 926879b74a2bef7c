"""
Timeline positioning for Coach Timeline.

PURPOSE: Map session times onto the pixel axis of the day view.
AI CONTEXT: Pure linear mapping - the slot height is the scale factor.

GEOMETRY:
    start_minutes    = (start_at - grid_start) / 1 min
    duration_minutes = max(0, (effective_end - start_at) / 1 min)
    top              = start_minutes / 60 * slot_height_px
    height           = max(min_height_px, duration_minutes / 60 * slot_height_px)

top is never clamped: a session starting before the grid gets a negative
top and the caller decides whether to clip or hide it. Only height has a
floor, so zero-length or reversed sessions stay visible.

OVERLAPS:
Concurrent sessions are not de-collided. resolve_collisions() is the hook
for lane assignment and currently returns its input unchanged.

USAGE:
    layout = layout_day(sessions, date(2024, 1, 1))
    for card in layout.positioned:
        print(card.session.display_title, card.top, card.height)
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from .bucketing import bucket_sessions
from .config import Config
from .filters import is_active
from .grid import TimeSlot, generate_day_grid
from .intervals import Interval
from .models import Session

__all__ = [
    "PositionedSession",
    "DayLayout",
    "CollisionResolver",
    "position_session",
    "position_sessions",
    "resolve_collisions",
    "layout_day",
]

_SECONDS_PER_MINUTE = 60.0
_MINUTES_PER_HOUR = 60.0


@dataclass(frozen=True)
class PositionedSession:
    """
    Session with its card geometry on the timeline.

    Attributes:
        session: Source session.
        top: Offset in px from the top of the first slot. May be negative.
        height: Card height in px, at least the configured minimum.
        lane: Horizontal lane index (0 until collision resolution exists).
        lane_count: Number of lanes sharing the row band.
    """

    session: Session
    top: float
    height: float
    lane: int = 0
    lane_count: int = 1

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.session.id,
            "title": self.session.display_title,
            "kind": self.session.kind,
            "start_at": self.session.start_at.isoformat(),
            "end_at": self.session.effective_end.isoformat(),
            "attendees_confirmed": self.session.attendees_confirmed,
            "top": self.top,
            "height": self.height,
            "lane": self.lane,
            "lane_count": self.lane_count,
        }


CollisionResolver = Callable[[list[PositionedSession]], list[PositionedSession]]


def position_session(
    session: Session,
    grid_start: datetime,
    slot_height_px: float = Config.SLOT_HEIGHT_PX,
    min_height_px: float = Config.MIN_CARD_HEIGHT_PX,
) -> PositionedSession:
    """
    Compute the card geometry for one session.

    Business context: A 90-minute PT block starting at 8:45 must cover
    the 8 AM row from three quarters down and all of the 9 AM row, so
    coaches see at a glance when they are busy.

    Args:
        session: Session to position.
        grid_start: Start instant of the grid's first slot.
        slot_height_px: Pixel height of one hour.
        min_height_px: Smallest card height rendered.

    Returns:
        PositionedSession with top and height in pixels.

    Raises:
        None: Reversed sessions get zero duration, hence min_height_px.

    Example:
        >>> grid_start = datetime(2024, 1, 1, 5)
        >>> s = Session('a', 'PT', datetime(2024, 1, 1, 8, 45), datetime(2024, 1, 1, 10, 15))
        >>> p = position_session(s, grid_start, 60, 40)
        >>> p.top, p.height
        (225.0, 90.0)
    """
    start_minutes = (session.start_at - grid_start).total_seconds() / _SECONDS_PER_MINUTE
    duration_minutes = max(
        0.0,
        (session.effective_end - session.start_at).total_seconds() / _SECONDS_PER_MINUTE,
    )
    top = (start_minutes / _MINUTES_PER_HOUR) * slot_height_px
    height = max(min_height_px, (duration_minutes / _MINUTES_PER_HOUR) * slot_height_px)
    return PositionedSession(session=session, top=top, height=height)


def resolve_collisions(positioned: list[PositionedSession]) -> list[PositionedSession]:
    """
    Lane-assignment hook for visually overlapping cards.

    Overlapping sessions currently render on top of each other. A lane
    algorithm can replace this function (or be passed to
    position_sessions) without touching the geometry math.

    Args:
        positioned: Cards in render order.

    Returns:
        The same list, unchanged.
    """
    return positioned


def position_sessions(
    sessions: Sequence[Session],
    grid_start: datetime,
    slot_height_px: float = Config.SLOT_HEIGHT_PX,
    min_height_px: float = Config.MIN_CARD_HEIGHT_PX,
    resolver: CollisionResolver = resolve_collisions,
) -> list[PositionedSession]:
    """
    Position every session, then pass the cards through the collision hook.

    Args:
        sessions: Sessions in render order.
        grid_start: Start instant of the grid's first slot.
        slot_height_px: Pixel height of one hour.
        min_height_px: Smallest card height rendered.
        resolver: Collision hook, identity by default.

    Returns:
        Positioned cards in the order returned by the resolver.
    """
    positioned = [
        position_session(session, grid_start, slot_height_px, min_height_px)
        for session in sessions
    ]
    return resolver(positioned)


@dataclass
class DayLayout:
    """
    Everything the day view renders, recomputed per request.

    Attributes:
        day: Calendar day shown.
        slots: Hour rows.
        buckets: Slot index -> sessions starting in that row.
        positioned: Cards with pixel geometry.
        slot_height_px: Scale used for positioned.
    """

    day: date
    slots: list[TimeSlot]
    buckets: dict[int, list[Session]] = field(default_factory=dict)
    positioned: list[PositionedSession] = field(default_factory=list)
    slot_height_px: float = Config.SLOT_HEIGHT_PX

    @property
    def canvas_height(self) -> float:
        """Total pixel height of the hour rows."""
        return len(self.slots) * self.slot_height_px

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day.isoformat(),
            "slot_height_px": self.slot_height_px,
            "slots": [
                {**slot.to_dict(), "session_ids": [s.id for s in self.buckets.get(i, [])]}
                for i, slot in enumerate(self.slots)
            ],
            "sessions": [card.to_dict() for card in self.positioned],
        }


def layout_day(
    sessions: Sequence[Session],
    day: date | datetime,
    start_hour: int = Config.DAY_START_HOUR,
    end_hour: int = Config.DAY_END_HOUR,
    slot_height_px: float = Config.SLOT_HEIGHT_PX,
    min_height_px: float = Config.MIN_CARD_HEIGHT_PX,
    include_out_of_window: bool = False,
    resolver: CollisionResolver = resolve_collisions,
) -> DayLayout:
    """
    Build the complete timeline for one day.

    Generates the grid, buckets sessions by start slot and positions them
    relative to the first slot's start.

    By default only bucketed sessions (those starting inside the grid
    window) are positioned, matching the schedule view. With
    include_out_of_window=True every session active on the day (day
    granularity) is positioned, for callers rendering an extended canvas;
    such cards may have a negative top or extend past the last row.

    Args:
        sessions: Candidate sessions, typically one day's fetch.
        day: Calendar day to lay out.
        start_hour: First grid hour.
        end_hour: Last grid hour, inclusive.
        slot_height_px: Pixel height of one hour.
        min_height_px: Smallest card height.
        include_out_of_window: Position sessions outside the hour window too.
        resolver: Collision hook for the positioned cards.

    Returns:
        DayLayout. An empty grid (start_hour > end_hour) yields no
        buckets; positions are then measured from the day's midnight.

    Example:
        >>> layout = layout_day(sessions, date(2024, 1, 1))
        >>> len(layout.slots)
        19
    """
    slots = generate_day_grid(day, start_hour, end_hour)
    buckets = bucket_sessions(sessions, slots)
    day_interval = Interval.for_day(day)
    grid_start = slots[0].start if slots else day_interval.start

    if include_out_of_window:
        to_position = [s for s in sessions if is_active(s.interval, day_interval)]
    else:
        to_position = [s for index in sorted(buckets) for s in buckets[index]]

    positioned = position_sessions(
        to_position, grid_start, slot_height_px, min_height_px, resolver
    )
    return DayLayout(
        day=day_interval.start.date(),
        slots=slots,
        buckets=buckets,
        positioned=positioned,
        slot_height_px=slot_height_px,
    )
