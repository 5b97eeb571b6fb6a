"""
Value types for weekly availability: days, time slots and day templates.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from enum import Enum

from app.domain.exceptions import InvalidConsultationDuration, InvalidTimeFormat

_HHMM = re.compile(r"^([01][0-9]|2[0-3]):([0-5][0-9])$")


class DayOfWeek(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def ordinal(self) -> int:
        """0=Monday, 6=Sunday (same as date.weekday())."""
        return _DAY_ORDER.index(self)

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def for_date(cls, d: date) -> DayOfWeek:
        return _DAY_ORDER[d.weekday()]

    @classmethod
    def ordered(cls) -> list[DayOfWeek]:
        return list(_DAY_ORDER)


_DAY_ORDER = tuple(DayOfWeek)


def parse_hhmm(value: str) -> time:
    """Parse a 24-hour HH:MM string into a minute-granular time."""
    if not isinstance(value, str):
        raise InvalidTimeFormat(value)
    match = _HHMM.match(value)
    if not match:
        raise InvalidTimeFormat(value)
    return time(int(match.group(1)), int(match.group(2)))


def format_hhmm(t: time) -> str:
    return t.strftime("%H:%M")


def minutes_of(t: time) -> int:
    return t.hour * 60 + t.minute


@dataclass(frozen=True, order=True)
class TimeSlot:
    """
    Half-open wall-clock interval [start, end) with minute granularity.

    start < end is not enforced here; the template validator reports it.
    """
    start: time
    end: time

    @classmethod
    def parse(cls, start: str, end: str) -> TimeSlot:
        return cls(start=parse_hhmm(start), end=parse_hhmm(end))

    @classmethod
    def from_dict(cls, data: dict) -> TimeSlot:
        return cls.parse(data["start"], data["end"])

    def to_dict(self) -> dict[str, str]:
        return {"start": format_hhmm(self.start), "end": format_hhmm(self.end)}

    def duration_minutes(self) -> int:
        return minutes_of(self.end) - minutes_of(self.start)

    def overlaps(self, other: TimeSlot) -> bool:
        return self.start < other.end and other.start < self.end

    def starts_at(self, on_date: date, tzinfo=None) -> datetime:
        return datetime.combine(on_date, self.start, tzinfo=tzinfo)

    def split(self, duration_minutes: int) -> list[TimeSlot]:
        """
        Cut this slot into consecutive units of duration_minutes.
        A trailing remainder shorter than the duration is dropped.
        """
        if duration_minutes <= 0:
            raise InvalidConsultationDuration(duration_minutes)
        units: list[TimeSlot] = []
        step = timedelta(minutes=duration_minutes)
        base = datetime.combine(date.min, time())
        current = base + timedelta(minutes=minutes_of(self.start))
        end = base + timedelta(minutes=minutes_of(self.end))
        while current + step <= end:
            units.append(TimeSlot(start=current.time(), end=(current + step).time()))
            current += step
        return units

    def __str__(self) -> str:
        return f"{format_hhmm(self.start)}-{format_hhmm(self.end)}"


@dataclass(frozen=True)
class DayTemplate:
    """
    Recurring availability for one day of the week.

    Slots are kept sorted by start time. Two templates are equal when every
    field is equal, which is what dirty tracking relies on.
    """
    day: DayOfWeek
    is_available: bool = False
    slots: tuple[TimeSlot, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "slots", tuple(sorted(self.slots)))

    @classmethod
    def unavailable(cls, day: DayOfWeek) -> DayTemplate:
        return cls(day=day, is_available=False, slots=())

    @classmethod
    def from_dicts(cls, day: DayOfWeek, is_available: bool, slots: list[dict]) -> DayTemplate:
        return cls(day=day, is_available=is_available, slots=tuple(TimeSlot.from_dict(s) for s in slots))

    def slots_as_dicts(self) -> list[dict[str, str]]:
        return [s.to_dict() for s in self.slots]

    def normalized(self) -> DayTemplate:
        """Persisted form: an unavailable day carries no slots."""
        if self.is_available or not self.slots:
            return self
        return replace(self, slots=())

    def with_slot(self, slot: TimeSlot) -> DayTemplate:
        return replace(self, slots=self.slots + (slot,))

    def without_slot(self, slot: TimeSlot) -> DayTemplate:
        return replace(self, slots=tuple(s for s in self.slots if s != slot))

    def with_availability(self, is_available: bool) -> DayTemplate:
        return replace(self, is_available=is_available)
