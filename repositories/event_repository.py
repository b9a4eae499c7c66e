"""
Repository for the `events` collection.

Registration is a conditional single-document update: a user is only
pushed while absent from registered_users and while the attendee count is
below capacity, and current_attendees moves in the same write.
"""

from __future__ import annotations

from typing import Any, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection

from schemas.models.event import EVENT_ONGOING, EVENT_UPCOMING, EventDoc


class EventRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    async def insert(self, event: EventDoc) -> EventDoc:
        result = await self._col.insert_one(event.to_mongo())
        return event.model_copy(update={"id": result.inserted_id})

    async def find_by_id(self, event_id: ObjectId) -> Optional[EventDoc]:
        return EventDoc.from_mongo(await self._col.find_one({"_id": event_id}))

    async def find_many(self, filters: dict[str, Any]) -> list[EventDoc]:
        cursor = self._col.find(filters).sort("date", 1)
        return [EventDoc.from_mongo(doc) for doc in await cursor.to_list(None)]

    async def find_schedulable(self) -> list[EventDoc]:
        return await self.find_many({"status": {"$in": [EVENT_UPCOMING, EVENT_ONGOING]}})

    async def update_fields(
        self, event_id: ObjectId, fields: dict[str, Any]
    ) -> Optional[EventDoc]:
        doc = await self._col.find_one_and_update(
            {"_id": event_id},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return EventDoc.from_mongo(doc)

    async def set_status(self, event_id: ObjectId, status: str) -> bool:
        result = await self._col.update_one(
            {"_id": event_id}, {"$set": {"status": status}}
        )
        return result.modified_count > 0

    async def delete(self, event_id: ObjectId) -> bool:
        result = await self._col.delete_one({"_id": event_id})
        return result.deleted_count > 0

    async def add_attendee(
        self, event_id: ObjectId, user_id: ObjectId, max_attendees: int
    ) -> Optional[EventDoc]:
        doc = await self._col.find_one_and_update(
            {
                "_id": event_id,
                "registered_users": {"$ne": user_id},
                "current_attendees": {"$lt": max_attendees},
            },
            {"$push": {"registered_users": user_id}, "$inc": {"current_attendees": 1}},
            return_document=ReturnDocument.AFTER,
        )
        return EventDoc.from_mongo(doc)

    async def remove_attendee(
        self, event_id: ObjectId, user_id: ObjectId
    ) -> Optional[EventDoc]:
        doc = await self._col.find_one_and_update(
            {"_id": event_id, "registered_users": user_id},
            {"$pull": {"registered_users": user_id}, "$inc": {"current_attendees": -1}},
            return_document=ReturnDocument.AFTER,
        )
        return EventDoc.from_mongo(doc)
