"""
Interval model for Coach Timeline.

PURPOSE: Closed time intervals with two explicit comparison modes.
AI CONTEXT: Foundation for grid bucketing, positioning and range filters.

COMPARISON MODES:
- Day granularity: both intervals are stretched to whole calendar days
  (00:00:00.000000 .. 23:59:59.999999) before comparing. Answers "is this
  on that day / within that range".
- Instant: exact datetimes, no normalization. Answers "where does it sit
  on the timeline" and "has it ended yet".

The two modes are separate functions. Do not add a flag that switches
between them: mixing them up causes off-by-one-day inclusion.

NORMALIZATION:
An interval whose end precedes its start is clamped to zero width
(end = start). Construction never raises for ordering.

USAGE:
    a = Interval(datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 10))
    day_overlap(a, Interval.for_day(date(2024, 1, 1)))   # True
    instant_before(a.end, datetime.now())
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time

__all__ = [
    "Interval",
    "as_datetime",
    "day_bounds",
    "to_day_bounds",
    "day_overlap",
    "instant_overlap",
    "instant_before",
]


def as_datetime(value: date | datetime) -> datetime:
    """
    Coerce a date or datetime to a datetime.

    Plain dates become midnight of that day. Datetimes pass through
    unchanged.

    Args:
        value: A date or datetime.

    Returns:
        Datetime instance.

    Example:
        >>> as_datetime(date(2024, 1, 1))
        datetime.datetime(2024, 1, 1, 0, 0)
    """
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def day_bounds(value: date | datetime) -> tuple[datetime, datetime]:
    """
    Get the first and last instant of the value's calendar day.

    Args:
        value: Any instant (or date) within the day.

    Returns:
        Tuple (00:00:00.000000, 23:59:59.999999) for that day, keeping
        the value's tzinfo if it has one.

    Example:
        >>> day_bounds(datetime(2024, 1, 1, 14, 30))
        (datetime.datetime(2024, 1, 1, 0, 0), datetime.datetime(2024, 1, 1, 23, 59, 59, 999999))
    """
    moment = as_datetime(value)
    start = datetime.combine(moment.date(), time.min, tzinfo=moment.tzinfo)
    end = datetime.combine(moment.date(), time.max, tzinfo=moment.tzinfo)
    return start, end


@dataclass(frozen=True)
class Interval:
    """
    Closed time interval [start, end].

    Immutable. End is clamped to start when given in the wrong order, so
    duration is never negative.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        start = as_datetime(self.start)
        end = as_datetime(self.end)
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", max(start, end))

    @classmethod
    def for_day(cls, value: date | datetime) -> Interval:
        """
        Build the whole-day interval containing value.

        Args:
            value: Any instant (or date) within the day.

        Returns:
            Interval covering the full calendar day.
        """
        start, end = day_bounds(value)
        return cls(start, end)

    @classmethod
    def for_days(cls, first: date | datetime, last: date | datetime) -> Interval:
        """
        Build an interval from the start of first's day to the end of last's day.

        Args:
            first: Day the range begins on.
            last: Day the range ends on (inclusive).

        Returns:
            Day-normalized interval. Clamped to first's day when last < first.
        """
        return cls(day_bounds(first)[0], day_bounds(last)[1])

    @property
    def duration_minutes(self) -> float:
        """Length in minutes, never negative."""
        return (self.end - self.start).total_seconds() / 60.0

    @property
    def is_multi_day(self) -> bool:
        """True when start and end fall on different calendar days."""
        return self.start.date() != self.end.date()

    def contains(self, instant: datetime) -> bool:
        """Check start <= instant <= end on exact instants."""
        return self.start <= instant <= self.end


def to_day_bounds(interval: Interval) -> Interval:
    """
    Stretch an interval to whole calendar days.

    The start moves to 00:00:00.000000 of its day and the end to
    23:59:59.999999 of its day. Applying it twice gives the same result
    as applying it once.

    Args:
        interval: Interval to normalize.

    Returns:
        New day-aligned Interval.

    Example:
        >>> i = Interval(datetime(2024, 1, 1, 9), datetime(2024, 1, 2, 8))
        >>> to_day_bounds(i).end
        datetime.datetime(2024, 1, 2, 23, 59, 59, 999999)
    """
    return Interval(day_bounds(interval.start)[0], day_bounds(interval.end)[1])


def day_overlap(a: Interval, b: Interval) -> bool:
    """
    Closed overlap test at day granularity.

    Both intervals are normalized to day bounds, then
    a.start <= b.end and a.end >= b.start.

    Business context: "Is this session happening today" and "does this
    timed challenge touch the requested week" are questions about days,
    not instants. A challenge ending on Monday at 00:00 is still a Monday
    challenge.

    Args:
        a: Candidate interval.
        b: Query interval.

    Returns:
        True when the intervals share at least one calendar day.

    Example:
        >>> monday = Interval.for_day(date(2024, 1, 1))
        >>> evening = Interval(datetime(2024, 1, 1, 21), datetime(2024, 1, 1, 22))
        >>> day_overlap(evening, monday)
        True
    """
    a_day = to_day_bounds(a)
    b_day = to_day_bounds(b)
    return a_day.start <= b_day.end and a_day.end >= b_day.start


def instant_overlap(a: Interval, b: Interval) -> bool:
    """
    Closed overlap test on exact instants (no normalization).

    Args:
        a: First interval.
        b: Second interval.

    Returns:
        True when a.start <= b.end and a.end >= b.start. Touching
        endpoints count as overlapping.
    """
    return a.start <= b.end and a.end >= b.start


def instant_before(instant: datetime, reference: datetime) -> bool:
    """
    Strict "happened before" test on exact instants.

    Used to classify an already-filtered session as past (its end is
    before now) without rounding to days.

    Args:
        instant: Instant being classified.
        reference: Instant compared against, typically now.

    Returns:
        True when instant < reference.
    """
    return instant < reference
