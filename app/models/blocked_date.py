from datetime import date

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class BlockedDate(SQLModel, table=True):
    __tablename__ = "blocked_dates"
    __table_args__ = (
        UniqueConstraint("provider_id", "blocked_date", name="uq_blocked_dates_provider_date"),
    )
    id: int | None = Field(default=None, primary_key=True)
    provider_id: int = Field(foreign_key="providers.id", index=True)
    blocked_date: date = Field(index=True)
    reason: str | None = None
