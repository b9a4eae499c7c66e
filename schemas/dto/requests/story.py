"""
Request DTOs for success stories.

CreateStoryRequest — POST /api/stories. The photo is referenced by URL;
uploads are not accepted.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.datetime_utils import parse_datetime


class CreateStoryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    names: str = Field(min_length=1)
    wedding_date: datetime = Field(alias="weddingDate")
    location: str = Field(min_length=1)
    email: str = Field(min_length=1)
    story: str = Field(min_length=1)
    image_url: str = Field(alias="imageUrl")

    @field_validator("wedding_date", mode="before")
    @classmethod
    def _parse_date(cls, v):
        parsed = parse_datetime(v)
        if parsed is None:
            raise ValueError("weddingDate must be an ISO 8601 date")
        return parsed

    @field_validator("image_url")
    @classmethod
    def _check_image_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("imageUrl must be an http(s) URL")
        return v
