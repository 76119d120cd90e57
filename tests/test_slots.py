"""Tests for time parsing and the slot generator."""

import pytest

from app.scheduling.slots import add_minutes, format_time, generate_slots, parse_time


class TestParseTime:
    """HH:MM parsing."""

    @pytest.mark.parametrize(
        ("value", "minutes"),
        [("00:00", 0), ("09:30", 570), ("23:59", 1439), ("24:00", 1440)],
    )
    def test_valid_times(self, value, minutes):
        assert parse_time(value) == minutes

    @pytest.mark.parametrize(
        "value", ["9:00", "09:60", "24:30", "25:00", "ab:cd", "0900", "", None]
    )
    def test_invalid_times(self, value):
        with pytest.raises(ValueError):
            parse_time(value)

    def test_format_round_trip(self):
        assert format_time(parse_time("13:45")) == "13:45"

    def test_add_minutes(self):
        assert add_minutes("09:00", 45) == "09:45"
        assert add_minutes("23:30", 30) == "24:00"

    def test_format_rejects_offsets_outside_a_day(self):
        with pytest.raises(ValueError):
            format_time(1441)
        with pytest.raises(ValueError):
            format_time(-1)


class TestGenerateSlots:
    """Slot grid generation."""

    def test_default_clinic_day(self):
        slots = generate_slots("09:00", "17:00")
        assert len(slots) == 16
        assert slots[0] == "09:00"
        assert slots[-1] == "16:30"

    @pytest.mark.parametrize(
        ("start", "end", "step"),
        [
            ("09:00", "17:00", 30),
            ("08:00", "12:00", 15),
            ("00:00", "24:00", 60),
            ("10:00", "11:00", 20),
        ],
    )
    def test_even_ranges_have_exact_length_and_increase(self, start, end, step):
        slots = generate_slots(start, end, step)
        assert len(slots) == (parse_time(end) - parse_time(start)) // step
        minutes = [parse_time(slot) for slot in slots]
        assert all(later > earlier for earlier, later in zip(minutes, minutes[1:]))

    def test_end_is_exclusive(self):
        assert "17:00" not in generate_slots("09:00", "17:00", 30)

    def test_partial_final_slot_is_dropped(self):
        assert generate_slots("09:00", "10:45", 30) == ["09:00", "09:30", "10:00"]

    def test_empty_when_window_shorter_than_a_slot(self):
        assert generate_slots("09:00", "09:20", 30) == []
        assert generate_slots("10:00", "09:00", 30) == []

    def test_deterministic(self):
        assert generate_slots("09:00", "17:00", 30) == generate_slots("09:00", "17:00", 30)

    def test_rejects_non_positive_step(self):
        with pytest.raises(ValueError):
            generate_slots("09:00", "17:00", 0)
