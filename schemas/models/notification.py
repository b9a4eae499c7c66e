"""
In-app notification document model.

Maps to the `notifications` MongoDB collection. Event activity fans out one
document per recipient: every user when an event is scheduled, every admin
when someone registers or unregisters.
"""

from __future__ import annotations

from typing import Any, Optional

from schemas.models.base import MongoBaseModel, PyObjectId, UtcDatetime


class NotificationDoc(MongoBaseModel):
    """Document model for the `notifications` collection."""

    user_id: PyObjectId
    event_id: Optional[PyObjectId] = None
    message: str
    read: bool = False
    created_at: Optional[UtcDatetime] = None

    def to_wire(self) -> dict[str, Any]:
        return {
            "id": str(self.id) if self.id is not None else None,
            "eventId": str(self.event_id) if self.event_id is not None else None,
            "message": self.message,
            "read": self.read,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
