"""
Request DTOs for admin moderation endpoints.

UpdateUserStatusRequest — PUT /api/admin/users/{profile_id}/status
AdminUpdateUserRequest  — PUT /api/admin/users/{profile_id}
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

ProfileStatus = Literal["active", "inactive", "flagged", "under_review"]


class UpdateUserStatusRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: ProfileStatus


class AdminUpdateUserRequest(BaseModel):
    """Partial account edit; omitted fields are left untouched."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = None
    role: Optional[Literal["user", "admin", "moderator"]] = None
    status: Optional[ProfileStatus] = None

    @model_validator(mode="after")
    def _require_change(self) -> "AdminUpdateUserRequest":
        if self.model_dump(exclude_none=True) == {}:
            raise ValueError("At least one of name, phone, role or status is required")
        return self
