"""
Provider-side editing session for the weekly template.

Holds a draft per day next to the (template, version) it was read at. Each
save writes exactly one day in its own transaction, so unsaved edits on
other days never reach the store.
"""

import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.domain.exceptions import ConflictError
from app.domain.schedule import DayOfWeek, DayTemplate, TimeSlot
from app.domain.validation import check_slot, validate_day
from app.services.template_store import VersionedDay, get_day, get_template, save_day

logger = logging.getLogger(__name__)


class ScheduleEditSession:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], provider_id: int):
        self._session_factory = session_factory
        self.provider_id = provider_id
        self._draft: dict[DayOfWeek, DayTemplate] = {}
        self._baseline: dict[DayOfWeek, VersionedDay] = {}

    @classmethod
    async def open(
        cls, session_factory: async_sessionmaker[AsyncSession], provider_id: int
    ) -> "ScheduleEditSession":
        edit_session = cls(session_factory, provider_id)
        await edit_session.reload()
        return edit_session

    async def reload(self, day: DayOfWeek | None = None) -> None:
        """Re-read the stored template (one day, or all of them) and drop the matching drafts."""
        async with self._session_factory() as db:
            if day is None:
                self._baseline = dict(await get_template(db, self.provider_id))
                self._draft = {d: v.template for d, v in self._baseline.items()}
            else:
                self._baseline[day] = await get_day(db, self.provider_id, day)
                self._draft[day] = self._baseline[day].template

    # --- reading ---

    def draft(self, day: DayOfWeek) -> DayTemplate:
        return self._draft[day]

    def baseline(self, day: DayOfWeek) -> VersionedDay:
        return self._baseline[day]

    def is_dirty(self, day: DayOfWeek) -> bool:
        return self._draft[day] != self._baseline[day].template

    def dirty_days(self) -> list[DayOfWeek]:
        return [d for d in DayOfWeek.ordered() if d in self._draft and self.is_dirty(d)]

    # --- editing ---

    def edit(self, day: DayOfWeek, mutation: Callable[[DayTemplate], DayTemplate]) -> DayTemplate:
        updated = mutation(self._draft[day])
        if updated.day != day:
            raise ValueError(f"mutation turned {day.value} into {updated.day.value}")
        self._draft[day] = updated
        return updated

    def add_slot(self, day: DayOfWeek, slot: TimeSlot) -> DayTemplate:
        check_slot(self._draft[day], slot)
        return self.edit(day, lambda t: t.with_slot(slot))

    def replace_slot(self, day: DayOfWeek, old: TimeSlot, new: TimeSlot) -> DayTemplate:
        check_slot(self._draft[day], new, replacing=old)
        return self.edit(day, lambda t: t.without_slot(old).with_slot(new))

    def remove_slot(self, day: DayOfWeek, slot: TimeSlot) -> DayTemplate:
        return self.edit(day, lambda t: t.without_slot(slot))

    def set_available(self, day: DayOfWeek, is_available: bool) -> DayTemplate:
        return self.edit(day, lambda t: t.with_availability(is_available))

    def discard(self, day: DayOfWeek) -> None:
        self._draft[day] = self._baseline[day].template

    # --- saving ---

    async def save(self, day: DayOfWeek) -> int:
        """Validate and persist this day's draft. Returns the new version.

        On ConflictError the baseline is refreshed from the store and the error
        re-raised; the draft is kept so the provider can decide what to do.
        """
        draft = self._draft[day]
        validate_day(draft)
        expected = self._baseline[day].version
        async with self._session_factory() as db:
            try:
                new_version = await save_day(db, self.provider_id, day, draft, expected)
                await db.commit()
            except ConflictError:
                await db.rollback()
                self._baseline[day] = await get_day(db, self.provider_id, day)
                logger.info(
                    "Edit session conflict: provider=%s day=%s now at version %d",
                    self.provider_id, day.value, self._baseline[day].version,
                )
                raise
            except Exception:
                await db.rollback()
                raise
        saved = draft.normalized()
        self._baseline[day] = VersionedDay(saved, new_version)
        self._draft[day] = saved
        return new_version
