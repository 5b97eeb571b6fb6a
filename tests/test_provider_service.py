"""
Tests for the provider profile mirror.
"""

from datetime import UTC, date, datetime

import pytest

from app.domain.exceptions import InvalidConsultationDuration, ProviderNotFound
from app.services.provider_service import (
    consultation_duration,
    get_provider,
    provider_today,
    upsert_provider,
)

from tests.conftest import PROVIDER_ID


class TestUpsertProvider:
    """Tests for upsert_provider."""

    async def test_creates_provider(self, session):
        p = await upsert_provider(session, 7, full_name="Dr. New", consultation_duration_minutes=20)
        assert p.id == 7
        assert p.full_name == "Dr. New"
        assert consultation_duration(p) == 20
        assert p.timezone is None

    async def test_partial_update_keeps_other_fields(self, session, provider):
        await upsert_provider(session, PROVIDER_ID, consultation_duration_minutes=45)
        await session.commit()

        p = await get_provider(session, PROVIDER_ID)
        assert p.consultation_duration_minutes == 45
        assert p.timezone == "UTC"
        assert p.full_name == "Dr. Ada Test"

    async def test_time_zone_only_update(self, session, provider):
        await upsert_provider(session, PROVIDER_ID, timezone="Asia/Kolkata")
        p = await get_provider(session, PROVIDER_ID)
        assert p.timezone == "Asia/Kolkata"
        assert p.consultation_duration_minutes == 30

    @pytest.mark.parametrize("minutes", [0, -30])
    async def test_rejects_non_positive_duration(self, session, provider, minutes):
        with pytest.raises(InvalidConsultationDuration):
            await upsert_provider(session, PROVIDER_ID, consultation_duration_minutes=minutes)


class TestProviderClock:
    async def test_today_follows_provider_zone(self, session, provider):
        p = await upsert_provider(session, PROVIDER_ID, timezone="Pacific/Auckland")
        # 2030-01-06 20:00 UTC is already Monday morning in Auckland
        assert provider_today(p, datetime(2030, 1, 6, 20, 0, tzinfo=UTC)) == date(2030, 1, 7)

    async def test_unknown_provider(self, session):
        with pytest.raises(ProviderNotFound):
            await get_provider(session, 999)
