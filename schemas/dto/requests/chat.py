"""
Request DTOs for chat endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AddChatContactRequest(BaseModel):
    """Request body for POST /api/add-chat-contact."""

    model_config = ConfigDict(populate_by_name=True)

    profile_id: str = Field(alias="profileId", min_length=1)
    contact_id: str = Field(alias="contactId", min_length=1)
