from sqlmodel import Field, SQLModel


class Provider(SQLModel, table=True):
    """Scheduling view of a provider profile. The profile itself is managed upstream."""

    __tablename__ = "providers"
    id: int | None = Field(default=None, primary_key=True)
    full_name: str | None = None
    consultation_duration_minutes: int | None = None  # None -> settings default
    timezone: str | None = None  # IANA name; None -> settings default
    # ScheduleVersion of the blocked date set, bumped on every block/unblock
    blocked_dates_version: int = 0
