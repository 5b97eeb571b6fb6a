from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_session
from app.api.errors import to_http_exception
from app.api.schemas.booking import AvailableSlotsResponse
from app.api.schemas.common import SlotSchema
from app.domain.exceptions import SchedulingError
from app.services.slot_service import get_available_slots

router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("/{provider_id}", response_model=AvailableSlotsResponse)
async def available_slots(
    provider_id: int,
    date_param: date = Query(..., alias="date"),
    session: AsyncSession = Depends(get_session),
) -> AvailableSlotsResponse:
    """Bookable units for the date. A snapshot: booking re-checks, so a listed slot may still be refused."""
    try:
        slots = await get_available_slots(session, provider_id, date_param)
    except SchedulingError as e:
        raise to_http_exception(e) from e
    return AvailableSlotsResponse(
        date=date_param.isoformat(),
        slots=[SlotSchema.from_slot(s) for s in slots],
    )
