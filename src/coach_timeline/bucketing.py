"""
Session bucketing for Coach Timeline.

PURPOSE: Assign each session to the single grid slot containing its start.
AI CONTEXT: Grouping only. A 90-minute session is listed once, in the row
where it starts; how far it visually extends is positioning.py's job.

RULES:
- slot.start <= session.start_at < slot.end
- Sessions starting before the first slot or at/after the last slot's
  end are not bucketed
- At most one bucket per session
"""

from __future__ import annotations

import bisect
from collections.abc import Sequence
from datetime import datetime

from .grid import TimeSlot
from .models import Session

__all__ = ["bucket_sessions", "find_slot_index"]


def find_slot_index(
    grid: Sequence[TimeSlot],
    instant: datetime,
    starts: Sequence[datetime] | None = None,
) -> int | None:
    """
    Locate the slot containing an instant.

    Args:
        grid: Ordered, contiguous slots as produced by generate_day_grid().
        instant: Instant to locate.
        starts: Precomputed slot starts for repeated lookups on the same
            grid. Built from grid when None.

    Returns:
        Index into grid, or None when the instant falls outside it.

    Example:
        >>> grid = generate_day_grid(date(2024, 1, 1))
        >>> find_slot_index(grid, datetime(2024, 1, 1, 9, 45))
        4
    """
    if not grid:
        return None
    if starts is None:
        starts = [slot.start for slot in grid]
    index = bisect.bisect_right(starts, instant) - 1
    if index < 0 or not grid[index].contains(instant):
        return None
    return index


def bucket_sessions(
    sessions: Sequence[Session],
    grid: Sequence[TimeSlot],
) -> dict[int, list[Session]]:
    """
    Group sessions by the slot their start instant falls in.

    Business context: The hour rows list what starts in that hour. A
    session that runs from 8:45 to 10:15 is listed under 8 AM only; the
    card still stretches over the 9 AM row when positioned.

    Args:
        sessions: Sessions to bucket, in any order.
        grid: Day grid from generate_day_grid().

    Returns:
        Dict of slot index -> sessions starting in that slot, in input
        order. Slots without sessions are absent. Sessions outside the
        grid window are dropped.

    Raises:
        None: Empty inputs give an empty dict.

    Example:
        >>> buckets = bucket_sessions(sessions, generate_day_grid(day))
        >>> [s.title for s in buckets.get(4, [])]
        ['Circuits']
    """
    buckets: dict[int, list[Session]] = {}
    starts = [slot.start for slot in grid]
    for session in sessions:
        index = find_slot_index(grid, session.start_at, starts)
        if index is None:
            continue
        buckets.setdefault(index, []).append(session)
    return buckets
