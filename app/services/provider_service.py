from datetime import date, datetime
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.domain.exceptions import InvalidConsultationDuration, ProviderNotFound
from app.models.provider import Provider


async def get_provider(session: AsyncSession, provider_id: int) -> Provider:
    result = await session.execute(select(Provider).where(Provider.id == provider_id))
    provider = result.scalar_one_or_none()
    if not provider:
        raise ProviderNotFound(provider_id)
    return provider


async def upsert_provider(
    session: AsyncSession,
    provider_id: int,
    full_name: str | None = None,
    consultation_duration_minutes: int | None = None,
    timezone: str | None = None,
) -> Provider:
    """Mirror a provider profile into the scheduler (seed scripts, profile sync)."""
    if consultation_duration_minutes is not None and consultation_duration_minutes <= 0:
        raise InvalidConsultationDuration(consultation_duration_minutes)
    if timezone is not None:
        ZoneInfo(timezone)  # raises for unknown zones
    result = await session.execute(select(Provider).where(Provider.id == provider_id))
    provider = result.scalar_one_or_none()
    if provider is None:
        provider = Provider(id=provider_id)
    # fields left as None keep their stored value
    if full_name is not None:
        provider.full_name = full_name
    if consultation_duration_minutes is not None:
        provider.consultation_duration_minutes = consultation_duration_minutes
    if timezone is not None:
        provider.timezone = timezone
    session.add(provider)
    await session.flush()
    await session.refresh(provider)
    return provider


def consultation_duration(provider: Provider) -> int:
    minutes = provider.consultation_duration_minutes or settings.default_consultation_duration_minutes
    if minutes <= 0:
        raise InvalidConsultationDuration(minutes)
    return minutes


def provider_zone(provider: Provider) -> ZoneInfo:
    return ZoneInfo(provider.timezone or settings.default_timezone)


def provider_now(provider: Provider, now: datetime | None = None) -> datetime:
    """Current wall-clock time in the provider's zone. `now` may be naive UTC or aware."""
    tz = provider_zone(provider)
    if now is None:
        return datetime.now(tz)
    if now.tzinfo is None:
        now = now.replace(tzinfo=ZoneInfo("UTC"))
    return now.astimezone(tz)


def provider_today(provider: Provider, now: datetime | None = None) -> date:
    return provider_now(provider, now).date()


async def lock_provider(session: AsyncSession, provider_id: int) -> Provider:
    """Load the provider row FOR UPDATE.

    Taken first by reserve, reschedule and block_dates so that booking and
    blocking for one provider are serialized on backends with row locks.
    SQLite ignores the clause and relies on its single-writer lock instead.
    """
    result = await session.execute(
        select(Provider).where(Provider.id == provider_id).with_for_update()
    )
    provider = result.scalar_one_or_none()
    if not provider:
        raise ProviderNotFound(provider_id)
    return provider
