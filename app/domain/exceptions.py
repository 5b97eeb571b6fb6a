"""
Error taxonomy for the availability and booking scheduler.

Every error is a per-request outcome: validation errors reject a write,
conflict errors ask the caller to retry with fresh state, not-found errors
are surfaced as-is.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.schedule import DayOfWeek, TimeSlot


class SchedulingError(Exception):
    """Base class for all scheduler errors."""

    code = "SchedulingError"

    def to_detail(self) -> dict:
        return {"error": self.code, "message": str(self)}


# --- Validation ---

class ValidationError(SchedulingError):
    code = "ValidationError"


class EmptyAvailableDay(ValidationError):
    code = "EmptyAvailableDay"

    def __init__(self, day: DayOfWeek):
        self.day = day
        super().__init__(f"{day.label} is marked available but has no time slots")


class InvalidSlotBounds(ValidationError):
    code = "InvalidSlotBounds"

    def __init__(self, slot: TimeSlot):
        self.slot = slot
        super().__init__(f"Start time must be before end time ({slot})")

    def to_detail(self) -> dict:
        return {**super().to_detail(), "slot": self.slot.to_dict()}


class OverlappingSlots(ValidationError):
    code = "OverlappingSlots"

    def __init__(self, a: TimeSlot, b: TimeSlot):
        self.a = a
        self.b = b
        super().__init__(f"Slot {b} overlaps with slot {a}")

    def to_detail(self) -> dict:
        return {**super().to_detail(), "a": self.a.to_dict(), "b": self.b.to_dict()}


class UnsortedSlots(ValidationError):
    code = "UnsortedSlots"

    def __init__(self, day: DayOfWeek):
        self.day = day
        super().__init__(f"Time slots for {day.label} are not in chronological order")


class InvalidTimeFormat(ValidationError):
    code = "InvalidTimeFormat"

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Time must be in HH:MM format, got {value!r}")


class PastDateError(ValidationError):
    code = "PastDateError"

    def __init__(self, dates: list[date]):
        self.dates = dates
        super().__init__("Cannot block past dates")

    def to_detail(self) -> dict:
        return {**super().to_detail(), "invalidDates": [d.isoformat() for d in self.dates]}


class InvalidConsultationDuration(ValidationError):
    code = "InvalidConsultationDuration"

    def __init__(self, minutes: int):
        self.minutes = minutes
        super().__init__(f"Consultation duration must be a positive number of minutes, got {minutes}")


# --- Conflicts ---

class ConflictError(SchedulingError):
    """The stored day template moved past the version the caller last read."""

    code = "ConflictError"

    def __init__(self, day: DayOfWeek, expected_version: int, current_version: int):
        self.day = day
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            f"{day.label} schedule was changed elsewhere "
            f"(expected version {expected_version}, current version {current_version})"
        )

    def to_detail(self) -> dict:
        return {
            **super().to_detail(),
            "day": self.day.value,
            "expectedVersion": self.expected_version,
            "currentVersion": self.current_version,
        }


class SlotUnavailableError(SchedulingError):
    code = "SlotUnavailable"

    def __init__(self, provider_id: int, on_date: date, slot: TimeSlot):
        self.provider_id = provider_id
        self.on_date = on_date
        self.slot = slot
        super().__init__(f"Slot {slot} on {on_date.isoformat()} is no longer available")


class BlockedDatesConflict(SchedulingError):
    """Another request changed the blocked date set between our read and our write."""

    code = "BlockedDatesConflict"

    def __init__(self, provider_id: int, dates: list[date]):
        self.provider_id = provider_id
        self.dates = dates
        super().__init__("Blocked dates were changed elsewhere; reload and retry")

    def to_detail(self) -> dict:
        return {**super().to_detail(), "dates": [d.isoformat() for d in self.dates]}


class DateHasBookingsError(SchedulingError):
    code = "DateHasBookings"

    def __init__(self, dates: list[date]):
        self.dates = dates
        super().__init__("Cannot block dates with existing appointments")

    def to_detail(self) -> dict:
        return {**super().to_detail(), "conflictingDates": [d.isoformat() for d in self.dates]}


# --- Booking state ---

class BookingNotReschedulable(SchedulingError):
    code = "BookingNotReschedulable"

    def __init__(self, booking_id: int, status: str):
        self.booking_id = booking_id
        self.status = status
        super().__init__(f"Booking {booking_id} is {status} and cannot be rescheduled")

    def to_detail(self) -> dict:
        return {**super().to_detail(), "status": self.status}


# --- Not found ---

class NotFoundError(SchedulingError):
    code = "NotFound"


class ProviderNotFound(NotFoundError):
    code = "ProviderNotFound"

    def __init__(self, provider_id: int):
        self.provider_id = provider_id
        super().__init__(f"Provider {provider_id} not found")


class BookingNotFound(NotFoundError):
    code = "BookingNotFound"

    def __init__(self, booking_id: int):
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} not found")
