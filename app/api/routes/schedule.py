from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_session
from app.api.errors import to_http_exception
from app.api.schemas.common import SlotSchema
from app.api.schemas.schedule import (
    BlockDatesRequest,
    BlockDatesResponse,
    DayScheduleOut,
    SaveDayRequest,
    SaveDayResponse,
    ScheduleResponse,
    UnblockDatesRequest,
    UnblockDatesResponse,
)
from app.domain.exceptions import SchedulingError
from app.domain.schedule import DayTemplate
from app.services.provider_service import get_provider
from app.services.template_store import (
    block_dates,
    get_template,
    list_blocked,
    save_day,
    unblock_dates,
)

router = APIRouter(prefix="/schedule", tags=["schedule"])


@router.get("/{provider_id}", response_model=ScheduleResponse)
async def get_schedule(
    provider_id: int,
    session: AsyncSession = Depends(get_session),
) -> ScheduleResponse:
    try:
        template = await get_template(session, provider_id)
        provider = await get_provider(session, provider_id)
        blocked = await list_blocked(session, provider_id)
    except SchedulingError as e:
        raise to_http_exception(e) from e
    return ScheduleResponse(
        provider_id=provider_id,
        weekly_template=[
            DayScheduleOut(
                day=day,
                is_available=v.template.is_available,
                time_slots=[SlotSchema.from_slot(s) for s in v.template.slots],
                version=v.version,
            )
            for day, v in template.items()
        ],
        blocked_dates=sorted(blocked),
        blocked_dates_version=provider.blocked_dates_version,
    )


@router.put(
    "/{provider_id}/day",
    response_model=SaveDayResponse,
    dependencies=[Depends(get_current_user_id)],
)
async def put_day(
    provider_id: int,
    body: SaveDayRequest,
    session: AsyncSession = Depends(get_session),
) -> SaveDayResponse:
    """Save one day of the weekly template. Other days are never written."""
    try:
        template = DayTemplate(
            day=body.day,
            is_available=body.is_available,
            slots=tuple(s.to_slot() for s in body.time_slots),
        )
        version = await save_day(session, provider_id, body.day, template, body.expected_version)
    except SchedulingError as e:
        raise to_http_exception(e) from e
    return SaveDayResponse(day=body.day, version=version)


@router.post(
    "/{provider_id}/block",
    response_model=BlockDatesResponse,
    dependencies=[Depends(get_current_user_id)],
)
async def block(
    provider_id: int,
    body: BlockDatesRequest,
    session: AsyncSession = Depends(get_session),
) -> BlockDatesResponse:
    try:
        newly_blocked = await block_dates(session, provider_id, body.dates, reason=body.reason)
        blocked = await list_blocked(session, provider_id)
        provider = await get_provider(session, provider_id)
    except SchedulingError as e:
        raise to_http_exception(e) from e
    return BlockDatesResponse(
        blocked_dates=sorted(blocked),
        newly_blocked=newly_blocked,
        version=provider.blocked_dates_version,
    )


@router.post(
    "/{provider_id}/unblock",
    response_model=UnblockDatesResponse,
    dependencies=[Depends(get_current_user_id)],
)
async def unblock(
    provider_id: int,
    body: UnblockDatesRequest,
    session: AsyncSession = Depends(get_session),
) -> UnblockDatesResponse:
    try:
        removed = await unblock_dates(session, provider_id, body.dates)
        blocked = await list_blocked(session, provider_id)
        provider = await get_provider(session, provider_id)
    except SchedulingError as e:
        raise to_http_exception(e) from e
    return UnblockDatesResponse(
        blocked_dates=sorted(blocked),
        removed=removed,
        version=provider.blocked_dates_version,
    )
