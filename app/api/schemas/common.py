from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.domain.schedule import TimeSlot


class CamelModel(BaseModel):
    """JSON uses camelCase; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SlotSchema(CamelModel):
    start: str  # HH:MM, 24-hour
    end: str

    @classmethod
    def from_slot(cls, slot: TimeSlot) -> "SlotSchema":
        return cls(**slot.to_dict())

    def to_slot(self) -> TimeSlot:
        return TimeSlot.parse(self.start, self.end)
