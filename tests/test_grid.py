"""Tests for grid module."""

from __future__ import annotations

from datetime import date, datetime, timedelta

from coach_timeline.grid import TimeSlot, format_slot_label, generate_day_grid


class TestGenerateDayGrid:
    """Test suite for generate_day_grid.

    Categories:
    1. Default shape (2 tests)
    2. Contiguity and anchoring (2 tests)
    3. Custom and empty windows (2 tests)
    """

    def test_default_grid_has_19_slots(self) -> None:
        """Verifies the default 5 AM to 11 PM window yields 19 rows.

        Business context:
        The schedule always shows the same hour rows so the layout does
        not jump around between quiet and busy days.

        Arrangement:
        Any day, default hours.

        Action:
        Generate the grid.

        Assertion Strategy:
        19 slots, first labelled '5 AM', last '11 PM'.
        """
        slots = generate_day_grid(date(2024, 1, 1))
        assert len(slots) == 19
        assert slots[0].label == "5 AM"
        assert slots[-1].label == "11 PM"

    def test_last_slot_ends_at_next_midnight(self) -> None:
        slots = generate_day_grid(date(2024, 1, 1))
        assert slots[-1].end == datetime(2024, 1, 2, 0, 0)

    def test_slots_are_contiguous_one_hour(self) -> None:
        slots = generate_day_grid(date(2024, 1, 1), 5, 23)
        for current, following in zip(slots, slots[1:], strict=False):
            assert current.end == following.start
        assert all(s.end - s.start == timedelta(hours=1) for s in slots)

    def test_time_of_day_is_ignored(self) -> None:
        from_date = generate_day_grid(date(2024, 1, 1))
        from_datetime = generate_day_grid(datetime(2024, 1, 1, 15, 42))
        assert from_date == from_datetime
        assert from_date[0].start == datetime(2024, 1, 1, 5)

    def test_custom_window(self) -> None:
        slots = generate_day_grid(date(2024, 1, 1), start_hour=9, end_hour=11)
        assert [s.hour_index for s in slots] == [9, 10, 11]

    def test_start_after_end_is_empty(self) -> None:
        assert generate_day_grid(date(2024, 1, 1), start_hour=12, end_hour=8) == []


class TestTimeSlot:
    """Test suite for TimeSlot helpers.

    Categories:
    1. Containment (1 test)
    2. Past flag (1 test)
    3. Labels (2 tests)
    """

    def test_contains_is_half_open(self) -> None:
        slot = TimeSlot(8, datetime(2024, 1, 1, 8), datetime(2024, 1, 1, 9))
        assert slot.contains(datetime(2024, 1, 1, 8))
        assert slot.contains(datetime(2024, 1, 1, 8, 59, 59))
        assert not slot.contains(datetime(2024, 1, 1, 9))

    def test_is_past_once_started(self) -> None:
        slot = TimeSlot(8, datetime(2024, 1, 1, 8), datetime(2024, 1, 1, 9))
        assert slot.is_past(datetime(2024, 1, 1, 8, 30))
        assert not slot.is_past(datetime(2024, 1, 1, 8))
        assert not slot.is_past(datetime(2024, 1, 1, 7))

    def test_format_slot_label_hours(self) -> None:
        assert format_slot_label(datetime(2024, 1, 1, 0)) == "12 AM"
        assert format_slot_label(datetime(2024, 1, 1, 12)) == "12 PM"
        assert format_slot_label(datetime(2024, 1, 1, 23)) == "11 PM"

    def test_format_slot_label_keeps_minutes(self) -> None:
        assert format_slot_label(datetime(2024, 1, 1, 9, 30)) == "9:30 AM"
        assert format_slot_label(datetime(2024, 1, 1, 13, 5)) == "1:05 PM"

    def test_to_dict(self) -> None:
        slot = TimeSlot(5, datetime(2024, 1, 1, 5), datetime(2024, 1, 1, 6))
        assert slot.to_dict() == {
            "hour_index": 5,
            "start": "2024-01-01T05:00:00",
            "end": "2024-01-01T06:00:00",
            "label": "5 AM",
        }
