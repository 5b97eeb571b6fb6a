"""
Template validation.

validate_day is the authoritative gate run before every template write.
check_slot is the incremental form used while a single slot is being
edited. Neither has side effects; both raise a ValidationError subclass.
"""

from app.domain.exceptions import (
    EmptyAvailableDay,
    InvalidSlotBounds,
    OverlappingSlots,
    UnsortedSlots,
)
from app.domain.schedule import DayTemplate, TimeSlot


def _check_bounds(slot: TimeSlot) -> None:
    if slot.start >= slot.end:
        raise InvalidSlotBounds(slot)


def validate_day(day: DayTemplate) -> None:
    """Rules apply in order and the first failure wins."""
    if day.is_available and not day.slots:
        raise EmptyAvailableDay(day.day)

    for slot in day.slots:
        _check_bounds(slot)

    ordered = sorted(day.slots)
    for a, b in zip(ordered, ordered[1:]):
        # equal starts overlap too
        if a.end > b.start or a.start == b.start:
            raise OverlappingSlots(a, b)

    if list(day.slots) != ordered:
        raise UnsortedSlots(day.day)


def check_slot(day: DayTemplate, slot: TimeSlot, replacing: TimeSlot | None = None) -> None:
    """
    Validate one added or edited slot against the rest of the day.

    `replacing` is the slot being edited; it is skipped in the overlap scan.
    """
    _check_bounds(slot)
    for existing in day.slots:
        if replacing is not None and existing == replacing:
            continue
        if existing.overlaps(slot):
            raise OverlappingSlots(existing, slot)
