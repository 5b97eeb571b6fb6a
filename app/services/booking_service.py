"""
Booking ledger.

reserve re-checks availability and inserts in the caller's transaction. The
partial unique index on active (provider, date, slot) rows settles races
between requests that both passed the check. reschedule moves a booking
under the same rules.
"""

import logging
from datetime import UTC, date, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import BookingNotFound, BookingNotReschedulable, SlotUnavailableError
from app.domain.schedule import TimeSlot
from app.models.booking import Booking, BookingStatus
from app.services.provider_service import lock_provider
from app.services.slot_service import get_available_slots
from app.services.template_store import is_blocked

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


async def _flush_slot(session: AsyncSession, booking: Booking) -> None:
    """Write the booking's slot, turning a lost race into SlotUnavailableError.

    The date is checked against the blocked set again once the row is written,
    so a block that committed after the availability read still wins.
    """
    slot = booking.slot
    on_date = booking.appointment_date
    provider_id = booking.provider_id
    session.add(booking)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        logger.info(
            "Reservation collision: provider=%s date=%s slot=%s already taken",
            provider_id, on_date, slot,
        )
        raise SlotUnavailableError(provider_id, on_date, slot) from exc
    if await is_blocked(session, provider_id, on_date):
        await session.rollback()
        logger.info("Reservation refused: provider=%s date=%s was blocked meanwhile", provider_id, on_date)
        raise SlotUnavailableError(provider_id, on_date, slot)


async def reserve(
    session: AsyncSession,
    provider_id: int,
    on_date: date,
    slot: TimeSlot,
    patient_id: int,
    reason: str | None = None,
    now: datetime | None = None,
) -> Booking:
    await lock_provider(session, provider_id)
    available = await get_available_slots(session, provider_id, on_date, now=now)
    if slot not in available:
        logger.info(
            "Reservation refused: provider=%s date=%s slot=%s not available",
            provider_id, on_date, slot,
        )
        raise SlotUnavailableError(provider_id, on_date, slot)

    booking = Booking(
        provider_id=provider_id,
        patient_id=patient_id,
        appointment_date=on_date,
        slot_start=slot.start,
        slot_end=slot.end,
        status=BookingStatus.CONFIRMED.value,
        reason=reason,
    )
    await _flush_slot(session, booking)
    await session.refresh(booking)
    logger.info(
        "Reserved booking id=%s provider=%s date=%s slot=%s patient=%s",
        booking.id, provider_id, on_date, slot, patient_id,
    )
    return booking


async def get_booking(session: AsyncSession, booking_id: int) -> Booking:
    result = await session.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if not booking:
        raise BookingNotFound(booking_id)
    return booking


async def release(session: AsyncSession, booking_id: int) -> Booking:
    """Mark a booking cancelled, freeing its slot. Releasing twice is a no-op."""
    booking = await get_booking(session, booking_id)
    if not booking.is_active:
        return booking
    booking.status = BookingStatus.CANCELLED.value
    booking.released_at = _utc_now()
    session.add(booking)
    await session.flush()
    logger.info(
        "Released booking id=%s provider=%s date=%s slot=%s",
        booking.id, booking.provider_id, booking.appointment_date, booking.slot,
    )
    return booking


async def reschedule(
    session: AsyncSession,
    booking_id: int,
    on_date: date,
    slot: TimeSlot,
    now: datetime | None = None,
) -> Booking:
    """Move an active booking to another date and slot with the same provider.

    The booking's own time does not count against the target. On a lost race
    the session is rolled back and the booking keeps its original slot.
    """
    booking = await get_booking(session, booking_id)
    if booking.status in (BookingStatus.COMPLETED.value, BookingStatus.CANCELLED.value):
        raise BookingNotReschedulable(booking_id, booking.status)
    await lock_provider(session, booking.provider_id)
    if booking.appointment_date == on_date and booking.slot == slot:
        return booking

    available = await get_available_slots(
        session, booking.provider_id, on_date, now=now, exclude_booking_id=booking.id
    )
    if slot not in available:
        logger.info(
            "Reschedule refused: booking=%s date=%s slot=%s not available",
            booking_id, on_date, slot,
        )
        raise SlotUnavailableError(booking.provider_id, on_date, slot)

    previous = (booking.appointment_date, booking.slot)
    booking.appointment_date = on_date
    booking.slot_start = slot.start
    booking.slot_end = slot.end
    await _flush_slot(session, booking)
    logger.info(
        "Rescheduled booking id=%s from %s %s to %s %s",
        booking.id, previous[0], previous[1], on_date, slot,
    )
    return booking


async def list_bookings_for_patient(
    session: AsyncSession,
    patient_id: int,
    from_date: date | None = None,
    include_released: bool = False,
) -> list[Booking]:
    q = (
        select(Booking)
        .where(Booking.patient_id == patient_id)
        .order_by(Booking.appointment_date, Booking.slot_start)
    )
    if from_date:
        q = q.where(Booking.appointment_date >= from_date)
    if not include_released:
        q = q.where(Booking.status != BookingStatus.CANCELLED.value)
    result = await session.execute(q)
    return list(result.scalars().all())


async def list_bookings_for_provider(
    session: AsyncSession,
    provider_id: int,
    on_date: date | None = None,
    include_released: bool = False,
) -> list[Booking]:
    q = (
        select(Booking)
        .where(Booking.provider_id == provider_id)
        .order_by(Booking.appointment_date, Booking.slot_start)
    )
    if on_date:
        q = q.where(Booking.appointment_date == on_date)
    if not include_released:
        q = q.where(Booking.status != BookingStatus.CANCELLED.value)
    result = await session.execute(q)
    return list(result.scalars().all())
