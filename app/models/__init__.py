from app.models.provider import Provider
from app.models.day_template import DayTemplateRecord
from app.models.blocked_date import BlockedDate
from app.models.booking import Booking, BookingStatus

__all__ = [
    "Provider",
    "DayTemplateRecord",
    "BlockedDate",
    "Booking",
    "BookingStatus",
]
