"""
Date-range filtering for Coach Timeline.

PURPOSE: One shared "is this active in that range" predicate plus the
classifications built on top of it.
AI CONTEXT: Mixed granularity on purpose - read before changing.

GRANULARITY:
- Inclusion (is_active, filter_active, filter_active_today,
  challenge_status) compares whole days via intervals.day_overlap.
- Past/upcoming classification compares exact instants via
  intervals.instant_before against now.
- Timed-challenge conflicts compare the stored window instants via
  intervals.instant_overlap.

Both "sessions happening today" and "timed challenges within this week"
go through is_active. Do not add a second overlap implementation.

USAGE:
    todays = filter_active_today(sessions, now=datetime.now())
    past, upcoming = split_past_upcoming(todays, now=datetime.now())
    this_week = filter_active(challenges, Interval.for_days(monday, sunday))
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol, TypeVar

from .intervals import (
    Interval,
    as_datetime,
    day_bounds,
    day_overlap,
    instant_before,
    instant_overlap,
)
from .models import Session, TimedChallenge

__all__ = [
    "HasInterval",
    "ChallengeStatus",
    "TodayWindow",
    "is_active",
    "filter_active",
    "filter_active_today",
    "split_past_upcoming",
    "today_time_range",
    "challenge_status",
    "find_conflicting_challenge",
]


class HasInterval(Protocol):
    """Anything with a closed time interval (Session, TimedChallenge)."""

    @property
    def interval(self) -> Interval: ...


T = TypeVar("T", bound=HasInterval)


class ChallengeStatus:
    """Day-granularity lifecycle labels for date-bounded items."""

    UPCOMING = "upcoming"
    ACTIVE = "active"
    PAST = "past"


def is_active(interval: Interval, query_range: Interval) -> bool:
    """
    Decide whether an interval falls in a query range, by whole days.

    Business context: Used for "activities happening today" (query range
    is today) and "timed challenges within the requested week" (query
    range comes from the caller). Both screens must agree on what
    "in range" means, so both call this.

    Args:
        interval: Candidate interval.
        query_range: Requested range; only its days matter.

    Returns:
        True when the two share at least one calendar day.

    Example:
        >>> week = Interval.for_days(date(2024, 1, 1), date(2024, 1, 7))
        >>> is_active(Interval.for_days(date(2023, 12, 25), date(2024, 1, 1)), week)
        True
    """
    return day_overlap(interval, query_range)


def filter_active(items: Iterable[T], query_range: Interval) -> list[T]:
    """
    Keep the items whose interval is active in query_range.

    Args:
        items: Sessions, challenges or anything exposing .interval.
        query_range: Requested range.

    Returns:
        Matching items in input order.
    """
    return [item for item in items if is_active(item.interval, query_range)]


def filter_active_today(items: Iterable[T], now: datetime) -> list[T]:
    """
    Keep the items active on now's calendar day.

    Args:
        items: Sessions, challenges or anything exposing .interval.
        now: Current instant; only its day is used.

    Returns:
        Matching items in input order.
    """
    return filter_active(items, Interval.for_day(now))


def split_past_upcoming(
    sessions: Iterable[Session],
    now: datetime,
) -> tuple[list[Session], list[Session]]:
    """
    Split sessions into past and upcoming on exact instants.

    A session is past when its effective end is strictly before now, so
    a class that is still running counts as upcoming.

    Args:
        sessions: Sessions, usually already filtered to a day or range.
        now: Current instant.

    Returns:
        Tuple (past, upcoming). Upcoming is sorted by start ascending
        (next first), past by start descending (most recent first).

    Example:
        >>> past, upcoming = split_past_upcoming(sessions, datetime(2024, 1, 1, 12))
    """
    past: list[Session] = []
    upcoming: list[Session] = []
    for session in sessions:
        if instant_before(session.interval.end, now):
            past.append(session)
        else:
            upcoming.append(session)
    upcoming.sort(key=lambda s: s.start_at)
    past.sort(key=lambda s: s.start_at, reverse=True)
    return past, upcoming


@dataclass(frozen=True)
class TodayWindow:
    """
    Portion of a session that falls on today.

    Attributes:
        start: Session start if it begins today, else today 00:00.
        end: Session end if it ends today, else today 23:59:59.999999.
        is_multi_day: Whether the session spans more than one day.
    """

    start: datetime
    end: datetime
    is_multi_day: bool


def today_time_range(session: Session, now: datetime) -> TodayWindow | None:
    """
    Clip a session to today's part of it.

    Business context: The events list shows "today 18:00 - 23:59" for a
    weekend retreat that started yesterday, instead of the full span.

    Args:
        session: Session to clip.
        now: Current instant; defines "today".

    Returns:
        TodayWindow, or None when the session is not active today.
    """
    today = Interval.for_day(now)
    interval = session.interval
    if not is_active(interval, today):
        return None
    start = interval.start if interval.start.date() == today.start.date() else today.start
    end = interval.end if interval.end.date() == today.start.date() else today.end
    return TodayWindow(start=start, end=end, is_multi_day=interval.is_multi_day)


def challenge_status(item: HasInterval, today: date | datetime) -> str:
    """
    Classify a date-bounded item as upcoming, active or past.

    Compared by whole days: a challenge ending today is still active all
    day, one starting tomorrow is upcoming.

    Args:
        item: TimedChallenge (or anything exposing .interval).
        today: Reference day.

    Returns:
        One of ChallengeStatus.UPCOMING, ACTIVE or PAST.

    Example:
        >>> challenge_status(challenge, date(2024, 1, 7))
        'active'
    """
    today_start = day_bounds(today)[0]
    window_start = day_bounds(item.interval.start)[0]
    window_end = day_bounds(item.interval.end)[1]
    if window_start > today_start:
        return ChallengeStatus.UPCOMING
    if window_end < today_start:
        return ChallengeStatus.PAST
    return ChallengeStatus.ACTIVE


def find_conflicting_challenge(
    candidate: TimedChallenge,
    existing: Sequence[TimedChallenge],
) -> TimedChallenge | None:
    """
    Find an existing timed challenge whose window overlaps the candidate.

    Only one timed challenge may run at a time. Windows are compared on
    their stored start/end dates as instants (midnight of each date), so
    a challenge ending Jan 7 conflicts with one starting Jan 7 but not
    with one starting Jan 8. An existing entry with the candidate's id
    is ignored so edits do not conflict with themselves.

    Args:
        candidate: Challenge being created or edited.
        existing: Challenges already stored.

    Returns:
        First conflicting challenge, or None.
    """
    window = Interval(as_datetime(candidate.start_date), as_datetime(candidate.end_date))
    for other in existing:
        if other.id == candidate.id:
            continue
        other_window = Interval(as_datetime(other.start_date), as_datetime(other.end_date))
        if instant_overlap(window, other_window):
            return other
    return None
