from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_session
from app.api.errors import to_http_exception
from app.api.schemas.booking import (
    BookingCreatedResponse,
    BookingPublic,
    BookingRequest,
    RescheduleRequest,
)
from app.api.schemas.common import SlotSchema
from app.domain.exceptions import SchedulingError
from app.models.booking import Booking
from app.services.booking_service import list_bookings_for_patient, release, reschedule, reserve

router = APIRouter(prefix="/booking", tags=["booking"])


def _to_public(b: Booking) -> BookingPublic:
    return BookingPublic(
        booking_id=b.id,
        provider_id=b.provider_id,
        patient_id=b.patient_id,
        appointment_date=b.appointment_date,
        slot=SlotSchema.from_slot(b.slot),
        status=b.status,
        reason=b.reason,
        created_at=b.created_at,
    )


@router.post("", response_model=BookingCreatedResponse, status_code=status.HTTP_201_CREATED)
async def book(
    body: BookingRequest,
    session: AsyncSession = Depends(get_session),
    patient_id: int = Depends(get_current_user_id),
) -> BookingCreatedResponse:
    try:
        booking = await reserve(
            session,
            body.provider_id,
            body.appointment_date,
            body.slot.to_slot(),
            patient_id,
            reason=body.reason,
        )
    except SchedulingError as e:
        raise to_http_exception(e) from e
    return BookingCreatedResponse(booking_id=booking.id)


@router.get("", response_model=list[BookingPublic])
async def list_my_bookings(
    from_date: date | None = Query(None, alias="fromDate"),
    session: AsyncSession = Depends(get_session),
    patient_id: int = Depends(get_current_user_id),
) -> list[BookingPublic]:
    bookings = await list_bookings_for_patient(session, patient_id, from_date=from_date)
    return [_to_public(b) for b in bookings]


@router.delete(
    "/{booking_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(get_current_user_id)],
)
async def release_booking(
    booking_id: int,
    session: AsyncSession = Depends(get_session),
) -> None:
    try:
        await release(session, booking_id)
    except SchedulingError as e:
        raise to_http_exception(e) from e


@router.put(
    "/{booking_id}",
    response_model=BookingPublic,
    dependencies=[Depends(get_current_user_id)],
)
async def reschedule_booking(
    booking_id: int,
    body: RescheduleRequest,
    session: AsyncSession = Depends(get_session),
) -> BookingPublic:
    try:
        booking = await reschedule(session, booking_id, body.appointment_date, body.slot.to_slot())
    except SchedulingError as e:
        raise to_http_exception(e) from e
    return _to_public(booking)
