"""
Request DTOs for event endpoints.

EventRequest          — POST /api/events, PUT /api/events/{id}
RegisterEventRequest  — POST /api/events/{id}/register
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.datetime_utils import parse_datetime
from shared.validators import validate_time_of_day


class EventRequest(BaseModel):
    """Full event definition; PUT replaces every field."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    # Calendar day; any time component is dropped in favour of ``time``
    date: datetime
    time: str
    location: str = Field(min_length=1)
    type: Literal["meetup", "webinar", "workshop", "conference"]
    max_attendees: int = Field(alias="maxAttendees", gt=0)
    is_online: bool = Field(default=False, alias="isOnline")
    price: float = Field(default=0, ge=0)
    organizer: Optional[str] = None
    image: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v):
        parsed = parse_datetime(v)
        if parsed is None:
            raise ValueError("date must be an ISO 8601 date")
        return parsed

    @field_validator("time")
    @classmethod
    def _check_time(cls, v: str) -> str:
        if not validate_time_of_day(v):
            raise ValueError("time must be HH:MM")
        return v[:5]


class RegisterEventRequest(BaseModel):
    """Body for the register/unregister toggle. ``userId`` is a profile id."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId", min_length=1)
