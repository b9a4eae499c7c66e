"""
Chat message document model.

Maps to the `messages` MongoDB collection. `time` is the client-supplied
send time, either an "HH:MM" label or epoch milliseconds, stored verbatim;
created_at orders the history.
"""

from __future__ import annotations

from typing import Optional, Union

from schemas.models.base import MongoBaseModel, UtcDatetime


class MessageDoc(MongoBaseModel):
    """Document model for the `messages` collection."""

    sender_id: str
    receiver_id: str
    text: str
    time: Optional[Union[str, int, float]] = None
    edited: bool = False
    created_at: Optional[UtcDatetime] = None

    def to_wire(self) -> dict:
        """Shape sent to clients over the real-time channel and history API."""
        return {
            "id": str(self.id) if self.id is not None else None,
            "text": self.text,
            "senderId": self.sender_id,
            "receiverId": self.receiver_id,
            "time": self.time,
            "edited": self.edited,
        }
