from datetime import UTC, date, datetime, time
from enum import Enum

from sqlalchemy import Column, DateTime, Index, text
from sqlmodel import Field, SQLModel

from app.domain.schedule import TimeSlot


def _utc_now() -> datetime:
    """Aware UTC for TIMESTAMP WITH TIME ZONE columns."""
    return datetime.now(UTC)


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Anything but cancelled keeps the slot occupied
_ACTIVE_PREDICATE = "status <> 'cancelled'"


class Booking(SQLModel, table=True):
    __tablename__ = "bookings"
    __table_args__ = (
        # no two active bookings for the same (provider, date, slot)
        Index(
            "uq_bookings_active_slot",
            "provider_id",
            "appointment_date",
            "slot_start",
            "slot_end",
            unique=True,
            postgresql_where=text(_ACTIVE_PREDICATE),
            sqlite_where=text(_ACTIVE_PREDICATE),
        ),
    )
    id: int | None = Field(default=None, primary_key=True)
    provider_id: int = Field(foreign_key="providers.id", index=True)
    patient_id: int = Field(index=True)
    appointment_date: date = Field(index=True)
    slot_start: time
    slot_end: time
    status: str = Field(default=BookingStatus.CONFIRMED.value, max_length=16)
    reason: str | None = None
    created_at: datetime = Field(
        default_factory=_utc_now, sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    released_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))

    @property
    def slot(self) -> TimeSlot:
        return TimeSlot(start=self.slot_start, end=self.slot_end)

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.CANCELLED.value
