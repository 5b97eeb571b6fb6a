"""
Tests for template validation.
"""

import dataclasses

import pytest

from app.domain.exceptions import (
    EmptyAvailableDay,
    InvalidSlotBounds,
    OverlappingSlots,
    UnsortedSlots,
)
from app.domain.schedule import DayOfWeek, DayTemplate, TimeSlot
from app.domain.validation import check_slot, validate_day


def _day(*slots: str, available: bool = True) -> DayTemplate:
    parsed = tuple(TimeSlot.parse(*s.split("-")) for s in slots)
    return DayTemplate(day=DayOfWeek.MONDAY, is_available=available, slots=parsed)


class TestValidateDay:
    """Tests for validate_day."""

    def test_valid_day(self):
        validate_day(_day("09:00-12:00", "13:00-17:00"))

    def test_adjacent_slots_are_fine(self):
        validate_day(_day("09:00-10:00", "10:00-11:00"))

    def test_unavailable_empty_day_is_valid(self):
        validate_day(DayTemplate.unavailable(DayOfWeek.SUNDAY))

    def test_available_day_needs_slots(self):
        with pytest.raises(EmptyAvailableDay):
            validate_day(_day())

    @pytest.mark.parametrize("slot", ["12:00-09:00", "10:00-10:00"])
    def test_start_must_precede_end(self, slot):
        with pytest.raises(InvalidSlotBounds):
            validate_day(_day(slot))

    def test_overlapping_slots(self):
        with pytest.raises(OverlappingSlots) as exc_info:
            validate_day(_day("09:00-12:00", "11:00-13:00"))
        assert str(exc_info.value.a) == "09:00-12:00"
        assert str(exc_info.value.b) == "11:00-13:00"

    def test_same_start_overlaps(self):
        with pytest.raises(OverlappingSlots):
            validate_day(_day("09:00-10:00", "09:00-11:00"))

    def test_bounds_checked_before_overlap(self):
        # first failing rule wins
        with pytest.raises(InvalidSlotBounds):
            validate_day(_day("12:00-09:00", "08:00-13:00"))

    def test_unsorted_slots_rejected_when_constructor_bypassed(self):
        day = _day("09:00-10:00", "11:00-12:00")
        reversed_day = dataclasses.replace(day)
        object.__setattr__(reversed_day, "slots", tuple(reversed(day.slots)))
        with pytest.raises(UnsortedSlots):
            validate_day(reversed_day)

    def test_valid_day_is_sorted_and_disjoint(self):
        day = _day("15:00-16:00", "08:00-09:30", "10:00-12:00")
        validate_day(day)
        for a, b in zip(day.slots, day.slots[1:]):
            assert a.start < b.start
            assert a.end <= b.start


class TestCheckSlot:
    """Tests for incremental single-slot validation."""

    def test_new_slot_overlapping_existing(self):
        with pytest.raises(OverlappingSlots):
            check_slot(_day("09:00-12:00"), TimeSlot.parse("11:00", "13:00"))

    def test_new_slot_bad_bounds(self):
        with pytest.raises(InvalidSlotBounds):
            check_slot(_day("09:00-12:00"), TimeSlot.parse("15:00", "14:00"))

    def test_editing_a_slot_ignores_its_old_value(self):
        day = _day("09:00-12:00", "13:00-14:00")
        check_slot(day, TimeSlot.parse("09:00", "12:30"), replacing=TimeSlot.parse("09:00", "12:00"))

    def test_editing_still_checks_siblings(self):
        day = _day("09:00-12:00", "13:00-14:00")
        with pytest.raises(OverlappingSlots):
            check_slot(day, TimeSlot.parse("09:00", "13:30"), replacing=TimeSlot.parse("09:00", "12:00"))
