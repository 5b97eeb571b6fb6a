from datetime import date

from pydantic import Field

from app.api.schemas.common import CamelModel, SlotSchema
from app.domain.schedule import DayOfWeek


class DayScheduleOut(CamelModel):
    day: DayOfWeek
    is_available: bool
    time_slots: list[SlotSchema]
    version: int


class ScheduleResponse(CamelModel):
    provider_id: int
    weekly_template: list[DayScheduleOut]
    blocked_dates: list[date]
    blocked_dates_version: int


class SaveDayRequest(CamelModel):
    day: DayOfWeek
    time_slots: list[SlotSchema] = []
    is_available: bool
    expected_version: int = Field(ge=0)


class SaveDayResponse(CamelModel):
    day: DayOfWeek
    version: int


class BlockDatesRequest(CamelModel):
    dates: list[date] = Field(min_length=1)
    reason: str | None = None


class BlockDatesResponse(CamelModel):
    blocked_dates: list[date]
    newly_blocked: list[date]
    version: int


class UnblockDatesRequest(CamelModel):
    dates: list[date] = Field(min_length=1)


class UnblockDatesResponse(CamelModel):
    blocked_dates: list[date]
    removed: int
    version: int
