"""
Shared fixtures: a throwaway SQLite database per test and an HTTP client wired to it.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENV", "test")

from datetime import UTC, date, datetime  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

import app.models  # noqa: E402,F401 - register tables
from app.core.db import get_session  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.domain.schedule import DayOfWeek, DayTemplate, TimeSlot  # noqa: E402
from app.main import app as fastapi_app  # noqa: E402
from app.services.provider_service import upsert_provider  # noqa: E402
from app.services.template_store import save_day  # noqa: E402

PROVIDER_ID = 1
PATIENT_ID = 42

# 2030-01-07 is a Monday
MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)
# "now" well before MONDAY, so no unit is in the past
EARLIER = datetime(2029, 12, 1, 8, 0, tzinfo=UTC)

MORNING = TimeSlot.parse("09:00", "12:00")


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'scheduling.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
async def provider(session_factory):
    async with session_factory() as s:
        p = await upsert_provider(
            s, PROVIDER_ID, full_name="Dr. Ada Test", consultation_duration_minutes=30, timezone="UTC"
        )
        await s.commit()
    return p


@pytest.fixture
async def monday_morning(session_factory, provider):
    """Provider whose Mondays run 09:00-12:00."""
    async with session_factory() as s:
        await save_day(
            s,
            PROVIDER_ID,
            DayOfWeek.MONDAY,
            DayTemplate(day=DayOfWeek.MONDAY, is_available=True, slots=(MORNING,)),
            expected_version=0,
        )
        await s.commit()
    return provider


@pytest.fixture
async def client(session_factory):
    async def _get_session():
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    fastapi_app.dependency_overrides[get_session] = _get_session
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as c:
        yield c
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def provider_headers():
    return {"Authorization": f"Bearer {create_access_token(PROVIDER_ID)}"}


@pytest.fixture
def patient_headers():
    return {"Authorization": f"Bearer {create_access_token(PATIENT_ID)}"}
