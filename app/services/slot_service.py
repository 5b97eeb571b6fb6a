from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.schedule import DayOfWeek, DayTemplate, TimeSlot, minutes_of
from app.models.booking import Booking, BookingStatus
from app.services.provider_service import consultation_duration, get_provider, provider_now
from app.services.template_store import get_day, is_blocked


def derive_available_slots(
    template: DayTemplate,
    on_date: date,
    duration_minutes: int,
    blocked: bool,
    booked: list[TimeSlot],
    local_now: datetime,
) -> list[TimeSlot]:
    """Bookable units for one date, from the day's template, the blocked flag and active bookings.

    local_now is the current time in the provider's zone; units that already
    started are dropped when on_date is that day, and past dates yield nothing.
    """
    if blocked or not template.is_available:
        return []
    today = local_now.date()
    if on_date < today:
        return []

    units: list[TimeSlot] = []
    for slot in template.slots:
        units.extend(slot.split(duration_minutes))

    units = [u for u in units if not any(u.overlaps(b) for b in booked)]

    if on_date == today:
        current_minute = local_now.hour * 60 + local_now.minute
        units = [u for u in units if minutes_of(u.start) > current_minute]

    return sorted(units)


async def get_booked_slots(
    session: AsyncSession, provider_id: int, on_date: date, exclude_booking_id: int | None = None
) -> list[TimeSlot]:
    """Slots held by active bookings for the provider on that date."""
    q = select(Booking.slot_start, Booking.slot_end).where(
        Booking.provider_id == provider_id,
        Booking.appointment_date == on_date,
        Booking.status != BookingStatus.CANCELLED.value,
    )
    if exclude_booking_id is not None:
        q = q.where(Booking.id != exclude_booking_id)
    result = await session.execute(q)
    return [TimeSlot(start=row[0], end=row[1]) for row in result.all()]


async def get_available_slots(
    session: AsyncSession,
    provider_id: int,
    on_date: date,
    now: datetime | None = None,
    exclude_booking_id: int | None = None,
) -> list[TimeSlot]:
    """Re-derived on every call; never cache the result across a booking attempt.

    exclude_booking_id leaves one booking out of the occupied set, so a booking
    being moved does not block its own time.
    """
    provider = await get_provider(session, provider_id)
    if await is_blocked(session, provider_id, on_date):
        return []
    versioned = await get_day(session, provider_id, DayOfWeek.for_date(on_date))
    if not versioned.template.is_available:
        return []
    booked = await get_booked_slots(session, provider_id, on_date, exclude_booking_id)
    return derive_available_slots(
        versioned.template,
        on_date,
        consultation_duration(provider),
        blocked=False,
        booked=booked,
        local_now=provider_now(provider, now),
    )
