from datetime import date, datetime

from pydantic import Field

from app.api.schemas.common import CamelModel, SlotSchema


class AvailableSlotsResponse(CamelModel):
    date: str  # YYYY-MM-DD
    slots: list[SlotSchema]


class BookingRequest(CamelModel):
    provider_id: int
    appointment_date: date = Field(alias="date")
    slot: SlotSchema
    reason: str | None = None


class BookingCreatedResponse(CamelModel):
    booking_id: int


class BookingPublic(CamelModel):
    booking_id: int
    provider_id: int
    patient_id: int
    appointment_date: date = Field(alias="date")
    slot: SlotSchema
    status: str
    reason: str | None = None
    created_at: datetime


class RescheduleRequest(CamelModel):
    appointment_date: date = Field(alias="date")
    slot: SlotSchema
