"""
Success story document model.

Maps to the `stories` MongoDB collection. `image` is a URL supplied by the
client; the backend stores no files.
"""

from __future__ import annotations

from typing import Any, Optional

from schemas.models.base import MongoBaseModel, UtcDatetime


class StoryDoc(MongoBaseModel):
    """Document model for the `stories` collection."""

    names: str
    wedding_date: UtcDatetime
    location: str
    email: str
    story: str
    image: str
    created_at: Optional[UtcDatetime] = None

    def to_wire(self) -> dict[str, Any]:
        return {
            "id": str(self.id) if self.id is not None else None,
            "names": self.names,
            "weddingDate": self.wedding_date.date().isoformat(),
            "location": self.location,
            "email": self.email,
            "story": self.story,
            "image": self.image,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
