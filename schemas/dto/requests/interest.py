"""
Request DTOs for the interest endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SendInterestRequest(BaseModel):
    """POST /api/send-interest and DELETE /api/remove-interest."""

    model_config = ConfigDict(populate_by_name=True)

    user_profile_id: str = Field(alias="userProfileId", min_length=1)
    interested_profile_id: str = Field(alias="interestedProfileId", min_length=1)


class RemoveAllInterestsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_profile_id: str = Field(alias="userProfileId", min_length=1)


class PassProfileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_profile_id: str = Field(alias="userProfileId", min_length=1)
    passed_profile_id: str = Field(alias="passedProfileId", min_length=1)
