"""
Day grid generation for Coach Timeline.

PURPOSE: Build the fixed sequence of one-hour slots for a calendar day.
AI CONTEXT: Pure and deterministic - recomputed for every day view, never stored.

GRID SHAPE:
    generate_day_grid(day, 5, 23) -> 19 slots
    [05:00-06:00, 06:00-07:00, ..., 23:00-00:00 (next day)]

Slots are for categorical grouping (which row a session is listed in).
Pixel geometry lives in positioning.py and ignores slot boundaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from .config import Config
from .intervals import day_bounds

__all__ = ["TimeSlot", "generate_day_grid", "format_slot_label"]


def format_slot_label(moment: datetime) -> str:
    """
    Format a time for the hour column of the day view.

    On-the-hour times drop the minutes ("5 AM"); other times keep them
    ("9:30 AM"). Midnight and noon display as 12.

    Args:
        moment: Time to format.

    Returns:
        Short 12-hour label.

    Example:
        >>> format_slot_label(datetime(2024, 1, 1, 0, 0))
        '12 AM'
        >>> format_slot_label(datetime(2024, 1, 1, 13, 5))
        '1:05 PM'
    """
    period = "PM" if moment.hour >= 12 else "AM"
    display_hour = moment.hour % 12 or 12
    if moment.minute == 0:
        return f"{display_hour} {period}"
    return f"{display_hour}:{moment.minute:02d} {period}"


@dataclass(frozen=True)
class TimeSlot:
    """
    One hour row of the day grid, half-open [start, end).

    Attributes:
        hour_index: Hour of day the slot starts at (5 for 05:00).
        start: First instant of the slot.
        end: First instant after the slot (start + 1 hour).
    """

    hour_index: int
    start: datetime
    end: datetime

    @property
    def label(self) -> str:
        """Hour column label, e.g. '5 AM'."""
        return format_slot_label(self.start)

    def contains(self, instant: datetime) -> bool:
        """Check start <= instant < end."""
        return self.start <= instant < self.end

    def is_past(self, now: datetime) -> bool:
        """True once the slot has started; past rows render dimmed."""
        return self.start < now

    def to_dict(self) -> dict[str, object]:
        return {
            "hour_index": self.hour_index,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "label": self.label,
        }


def generate_day_grid(
    day: date | datetime,
    start_hour: int = Config.DAY_START_HOUR,
    end_hour: int = Config.DAY_END_HOUR,
) -> list[TimeSlot]:
    """
    Generate the ordered hourly slots for one calendar day.

    Any time-of-day on `day` is discarded; slots are anchored at the
    day's midnight. The last slot may end at midnight of the next day.

    Business context: The coach schedule shows one row per hour from
    5 AM to 11 PM. Fixed rows keep the layout stable whether the day is
    empty or packed.

    Args:
        day: Calendar day (date or any datetime on that day).
        start_hour: Hour of the first slot. Default Config.DAY_START_HOUR (5).
        end_hour: Hour of the last slot, inclusive. Default
            Config.DAY_END_HOUR (23).

    Returns:
        List of end_hour - start_hour + 1 TimeSlots in ascending order.
        Empty list when start_hour > end_hour.

    Raises:
        None: Total for all integer inputs.

    Example:
        >>> slots = generate_day_grid(date(2024, 1, 1))
        >>> len(slots), slots[0].label, slots[-1].label
        (19, '5 AM', '11 PM')
    """
    midnight = day_bounds(day)[0]
    slots: list[TimeSlot] = []
    for hour in range(start_hour, end_hour + 1):
        start = midnight + timedelta(hours=hour)
        slots.append(TimeSlot(hour_index=hour, start=start, end=start + timedelta(hours=1)))
    return slots
