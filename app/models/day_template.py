from datetime import UTC, datetime

from sqlalchemy import JSON, Column, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from app.domain.schedule import DayOfWeek, DayTemplate


def _utc_now() -> datetime:
    """Aware UTC for TIMESTAMP WITH TIME ZONE columns."""
    return datetime.now(UTC)


class DayTemplateRecord(SQLModel, table=True):
    """One row per (provider, day of week). A missing row means unavailable at version 0."""

    __tablename__ = "day_templates"
    __table_args__ = (
        UniqueConstraint("provider_id", "day_of_week", name="uq_day_templates_provider_day"),
    )
    id: int | None = Field(default=None, primary_key=True)
    provider_id: int = Field(foreign_key="providers.id", index=True)
    day_of_week: str = Field(max_length=9)
    is_available: bool = False
    slots: list[dict] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    version: int = 0
    updated_at: datetime = Field(
        default_factory=_utc_now, sa_column=Column(DateTime(timezone=True), nullable=False)
    )

    def to_template(self) -> DayTemplate:
        return DayTemplate.from_dicts(DayOfWeek(self.day_of_week), self.is_available, self.slots)
