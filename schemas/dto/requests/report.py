"""
Request DTOs for profile reports.

ReportProfileRequest — POST /api/report-profile. Every detail field is
required; the moderators' queue relies on all of them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ReportProfileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reporting_user_id: str = Field(alias="reportingUserId", min_length=1)
    reported_profile_id: str = Field(alias="reportedProfileId", min_length=1)
    reason: str = Field(min_length=1)
    category: str = Field(min_length=1)
    message: str = Field(min_length=1)
    name: str = Field(min_length=1)
    location: str = Field(min_length=1)
    profession: str = Field(min_length=1)
    education: str = Field(min_length=1)
