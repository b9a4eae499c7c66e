"""Repository for the `notifications` collection."""

from __future__ import annotations

from typing import Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection

from schemas.models.notification import NotificationDoc


class NotificationRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    async def insert_many(self, notifications: list[NotificationDoc]) -> int:
        if not notifications:
            return 0
        result = await self._col.insert_many([n.to_mongo() for n in notifications])
        return len(result.inserted_ids)

    async def find_for_user(self, user_id: ObjectId) -> list[NotificationDoc]:
        cursor = self._col.find({"user_id": user_id}).sort("created_at", -1)
        return [NotificationDoc.from_mongo(doc) for doc in await cursor.to_list(None)]

    async def mark_read(
        self, notification_id: ObjectId, user_id: ObjectId
    ) -> Optional[NotificationDoc]:
        """Flag one notification read; only its recipient can do so."""
        doc = await self._col.find_one_and_update(
            {"_id": notification_id, "user_id": user_id},
            {"$set": {"read": True}},
            return_document=ReturnDocument.AFTER,
        )
        return NotificationDoc.from_mongo(doc)

    async def delete_for_event(self, event_id: ObjectId) -> int:
        result = await self._col.delete_many({"event_id": event_id})
        return result.deleted_count
