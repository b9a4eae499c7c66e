"""
Event document model.

Maps to the `events` MongoDB collection.

`date` holds the calendar day (stored as midnight UTC) and `time` the
"HH:MM" start time; together they form the start instant used by the
status scheduler. current_attendees always equals len(registered_users).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.models.base import MongoBaseModel, PyObjectId, UtcDatetime
from shared.datetime_utils import combine_date_time

EVENT_UPCOMING = "upcoming"
EVENT_ONGOING = "ongoing"
EVENT_COMPLETED = "completed"
EVENT_CANCELLED = "cancelled"

EVENT_TYPES = ("meetup", "webinar", "workshop", "conference")


class EventDoc(MongoBaseModel):
    """Document model for the `events` collection."""

    title: str
    description: str
    date: UtcDatetime
    time: str
    location: str
    type: str
    status: str = EVENT_UPCOMING
    max_attendees: int
    current_attendees: int = 0
    is_online: bool = False
    price: float = 0
    organizer: str = "Admin"
    created_date: Optional[UtcDatetime] = None
    registered_users: list[PyObjectId] = []
    image: Optional[str] = None

    @property
    def starts_at(self) -> datetime:
        return combine_date_time(self.date, self.time)
