"""
Tests for the schedule value types.
"""

from datetime import date, time

import pytest

from app.domain.exceptions import InvalidConsultationDuration, InvalidTimeFormat
from app.domain.schedule import DayOfWeek, DayTemplate, TimeSlot


class TestTimeSlot:
    """Tests for TimeSlot."""

    def test_parse_hhmm(self):
        slot = TimeSlot.parse("09:00", "12:30")
        assert slot.start == time(9, 0)
        assert slot.end == time(12, 30)
        assert slot.duration_minutes() == 210
        assert str(slot) == "09:00-12:30"

    @pytest.mark.parametrize("value", ["9:00", "24:00", "12:60", "0900", "", "noon"])
    def test_parse_rejects_bad_format(self, value):
        with pytest.raises(InvalidTimeFormat):
            TimeSlot.parse(value, "13:00")

    def test_overlaps_is_half_open(self):
        a = TimeSlot.parse("09:00", "10:00")
        assert a.overlaps(TimeSlot.parse("09:30", "10:30"))
        assert not a.overlaps(TimeSlot.parse("10:00", "11:00"))
        assert not TimeSlot.parse("10:00", "11:00").overlaps(a)

    def test_split_into_units(self):
        units = TimeSlot.parse("09:00", "12:00").split(30)
        assert [str(u) for u in units] == [
            "09:00-09:30", "09:30-10:00", "10:00-10:30",
            "10:30-11:00", "11:00-11:30", "11:30-12:00",
        ]

    def test_split_drops_remainder(self):
        units = TimeSlot.parse("09:00", "10:45").split(30)
        assert [str(u) for u in units] == ["09:00-09:30", "09:30-10:00", "10:00-10:30"]

    def test_split_shorter_than_duration(self):
        assert TimeSlot.parse("09:00", "09:20").split(30) == []

    def test_split_up_to_last_minute(self):
        units = TimeSlot.parse("23:00", "23:59").split(20)
        assert [str(u) for u in units] == ["23:00-23:20", "23:20-23:40"]

    @pytest.mark.parametrize("minutes", [0, -15])
    def test_split_rejects_non_positive_duration(self, minutes):
        with pytest.raises(InvalidConsultationDuration):
            TimeSlot.parse("09:00", "12:00").split(minutes)


class TestDayTemplate:
    """Tests for DayTemplate."""

    def test_slots_sorted_on_construction(self):
        day = DayTemplate(
            day=DayOfWeek.MONDAY,
            is_available=True,
            slots=(TimeSlot.parse("14:00", "16:00"), TimeSlot.parse("09:00", "12:00")),
        )
        assert [str(s) for s in day.slots] == ["09:00-12:00", "14:00-16:00"]

    def test_structural_equality(self):
        a = DayTemplate.from_dicts(DayOfWeek.FRIDAY, True, [{"start": "09:00", "end": "10:00"}])
        b = DayTemplate(day=DayOfWeek.FRIDAY, is_available=True, slots=(TimeSlot.parse("09:00", "10:00"),))
        assert a == b
        assert a is not b
        assert a != b.with_availability(False)

    def test_normalized_clears_slots_when_unavailable(self):
        day = DayTemplate(day=DayOfWeek.MONDAY, is_available=False, slots=(TimeSlot.parse("09:00", "10:00"),))
        assert day.normalized().slots == ()
        available = day.with_availability(True)
        assert available.normalized() == available

    def test_with_and_without_slot(self):
        day = DayTemplate.unavailable(DayOfWeek.MONDAY).with_availability(True)
        slot = TimeSlot.parse("09:00", "10:00")
        assert day.with_slot(slot).slots == (slot,)
        assert day.with_slot(slot).without_slot(slot).slots == ()

    def test_day_for_date(self):
        assert DayOfWeek.for_date(date(2030, 1, 7)) is DayOfWeek.MONDAY
        assert DayOfWeek.for_date(date(2030, 1, 13)) is DayOfWeek.SUNDAY
        assert DayOfWeek.SUNDAY.ordinal == 6
        assert [d.value for d in DayOfWeek.ordered()][0] == "monday"
