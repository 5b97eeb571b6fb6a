"""
Weekly template store and blocked date set.

Each day template is its own row with its own version. save_day is a
compare-and-swap on that version and never touches sibling days.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import (
    BlockedDatesConflict,
    ConflictError,
    DateHasBookingsError,
    PastDateError,
)
from app.domain.schedule import DayOfWeek, DayTemplate
from app.domain.validation import validate_day
from app.models.blocked_date import BlockedDate
from app.models.booking import Booking, BookingStatus
from app.models.day_template import DayTemplateRecord
from app.models.provider import Provider
from app.services.provider_service import get_provider, lock_provider, provider_today

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VersionedDay:
    template: DayTemplate
    version: int


def _utc_now() -> datetime:
    return datetime.now(UTC)


async def _get_record(session: AsyncSession, provider_id: int, day: DayOfWeek) -> DayTemplateRecord | None:
    result = await session.execute(
        select(DayTemplateRecord).where(
            DayTemplateRecord.provider_id == provider_id,
            DayTemplateRecord.day_of_week == day.value,
        )
    )
    return result.scalar_one_or_none()


async def get_template(session: AsyncSession, provider_id: int) -> dict[DayOfWeek, VersionedDay]:
    """All seven days; days never saved come back unavailable at version 0."""
    await get_provider(session, provider_id)
    result = await session.execute(
        select(DayTemplateRecord).where(DayTemplateRecord.provider_id == provider_id)
    )
    out = {day: VersionedDay(DayTemplate.unavailable(day), 0) for day in DayOfWeek.ordered()}
    for record in result.scalars().all():
        out[DayOfWeek(record.day_of_week)] = VersionedDay(record.to_template(), record.version)
    return out


async def get_day(session: AsyncSession, provider_id: int, day: DayOfWeek) -> VersionedDay:
    await get_provider(session, provider_id)
    record = await _get_record(session, provider_id, day)
    if record is None:
        return VersionedDay(DayTemplate.unavailable(day), 0)
    return VersionedDay(record.to_template(), record.version)


async def _current_version(session: AsyncSession, provider_id: int, day: DayOfWeek) -> int:
    result = await session.execute(
        select(DayTemplateRecord.version).where(
            DayTemplateRecord.provider_id == provider_id,
            DayTemplateRecord.day_of_week == day.value,
        )
    )
    version = result.scalar_one_or_none()
    return version or 0


async def save_day(
    session: AsyncSession,
    provider_id: int,
    day: DayOfWeek,
    template: DayTemplate,
    expected_version: int,
) -> int:
    """Persist one day's template if its stored version still equals expected_version.

    Returns the new version. Raises ConflictError when the stored version has moved on.
    """
    if template.day != day:
        raise ValueError(f"template is for {template.day.value}, not {day.value}")
    validate_day(template)
    template = template.normalized()
    await get_provider(session, provider_id)

    new_version = expected_version + 1
    if expected_version == 0:
        # First write for this day; a concurrent first write trips the unique constraint.
        session.add(
            DayTemplateRecord(
                provider_id=provider_id,
                day_of_week=day.value,
                is_available=template.is_available,
                slots=template.slots_as_dicts(),
                version=new_version,
            )
        )
        try:
            await session.flush()
        except IntegrityError as exc:
            await session.rollback()
            current = await _current_version(session, provider_id, day)
            logger.info(
                "Template conflict: provider=%s day=%s expected=%d current=%d",
                provider_id, day.value, expected_version, current,
            )
            raise ConflictError(day, expected_version, current) from exc
    else:
        result = await session.execute(
            update(DayTemplateRecord)
            .where(
                DayTemplateRecord.provider_id == provider_id,
                DayTemplateRecord.day_of_week == day.value,
                DayTemplateRecord.version == expected_version,
            )
            .values(
                is_available=template.is_available,
                slots=template.slots_as_dicts(),
                version=new_version,
                updated_at=_utc_now(),
            )
        )
        if result.rowcount != 1:
            current = await _current_version(session, provider_id, day)
            logger.info(
                "Template conflict: provider=%s day=%s expected=%d current=%d",
                provider_id, day.value, expected_version, current,
            )
            raise ConflictError(day, expected_version, current)

    logger.info("Saved template: provider=%s day=%s version=%d", provider_id, day.value, new_version)
    return new_version


# --- Blocked dates ---

async def list_blocked(session: AsyncSession, provider_id: int) -> set[date]:
    result = await session.execute(
        select(BlockedDate.blocked_date).where(BlockedDate.provider_id == provider_id)
    )
    return {row[0] for row in result.all()}


async def is_blocked(session: AsyncSession, provider_id: int, on_date: date) -> bool:
    result = await session.execute(
        select(BlockedDate.id).where(
            BlockedDate.provider_id == provider_id,
            BlockedDate.blocked_date == on_date,
        )
    )
    return result.first() is not None


async def _bump_blocked_version(session: AsyncSession, provider: Provider) -> int:
    await session.execute(
        update(Provider)
        .where(Provider.id == provider.id)
        .values(blocked_dates_version=Provider.blocked_dates_version + 1)
        .execution_options(synchronize_session=False)
    )
    await session.refresh(provider)
    return provider.blocked_dates_version


async def _dates_with_active_bookings(
    session: AsyncSession, provider_id: int, dates: set[date]
) -> list[date]:
    result = await session.execute(
        select(Booking.appointment_date)
        .where(
            Booking.provider_id == provider_id,
            Booking.appointment_date.in_(sorted(dates)),
            Booking.status != BookingStatus.CANCELLED.value,
        )
        .distinct()
    )
    return sorted(row[0] for row in result.all())


async def block_dates(
    session: AsyncSession,
    provider_id: int,
    dates: list[date],
    reason: str | None = None,
    now: datetime | None = None,
) -> list[date]:
    """Block whole dates. Returns the dates that were not already blocked.

    A concurrent block of the same date surfaces as BlockedDatesConflict; a
    booking that lands between the check and the insert as DateHasBookingsError.
    Both roll the session back.
    """
    provider = await lock_provider(session, provider_id)
    wanted = set(dates)
    today = provider_today(provider, now)
    past = sorted(d for d in wanted if d < today)
    if past:
        raise PastDateError(past)
    conflicting = await _dates_with_active_bookings(session, provider_id, wanted)
    if conflicting:
        raise DateHasBookingsError(conflicting)

    already = await list_blocked(session, provider_id)
    new_dates = sorted(wanted - already)
    if not new_dates:
        return []
    session.add_all(
        BlockedDate(provider_id=provider_id, blocked_date=d, reason=reason) for d in new_dates
    )
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        logger.info("Blocked dates conflict: provider=%s dates=%s", provider_id, new_dates)
        raise BlockedDatesConflict(provider_id, new_dates) from exc

    # holding the write now; a booking committed after the first check shows up here
    conflicting = await _dates_with_active_bookings(session, provider_id, wanted)
    if conflicting:
        await session.rollback()
        logger.info("Blocking refused after insert: provider=%s booked=%s", provider_id, conflicting)
        raise DateHasBookingsError(conflicting)

    version = await _bump_blocked_version(session, provider)
    logger.info(
        "Blocked %d date(s) for provider=%s (blocked dates version %d)",
        len(new_dates), provider_id, version,
    )
    return new_dates


async def unblock_dates(session: AsyncSession, provider_id: int, dates: list[date]) -> int:
    """Remove dates from the blocked set. Returns how many were removed."""
    provider = await get_provider(session, provider_id)
    if not dates:
        return 0
    result = await session.execute(
        delete(BlockedDate).where(
            BlockedDate.provider_id == provider_id,
            BlockedDate.blocked_date.in_(sorted(set(dates))),
        )
    )
    removed = result.rowcount or 0
    if removed:
        version = await _bump_blocked_version(session, provider)
        logger.info(
            "Unblocked %d date(s) for provider=%s (blocked dates version %d)",
            removed, provider_id, version,
        )
    return removed


async def block_date(
    session: AsyncSession,
    provider_id: int,
    on_date: date,
    reason: str | None = None,
    now: datetime | None = None,
) -> bool:
    return bool(await block_dates(session, provider_id, [on_date], reason=reason, now=now))


async def unblock_date(session: AsyncSession, provider_id: int, on_date: date) -> bool:
    return bool(await unblock_dates(session, provider_id, [on_date]))
