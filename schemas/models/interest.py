"""
Interest record document model.

Maps to the `interests` MongoDB collection, unique on user_profile_id.

interested_profiles and passed_profiles are sets keyed by profile_id: the
repository only pushes an entry when no entry with that profile_id exists.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from schemas.models.base import MongoBaseModel, UtcDatetime


class InterestEntry(BaseModel):
    profile_id: str
    created_at: Optional[UtcDatetime] = None


class InterestDoc(MongoBaseModel):
    """Document model for the `interests` collection."""

    user_profile_id: str
    interested_profiles: list[InterestEntry] = []
    passed_profiles: list[InterestEntry] = []
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None
