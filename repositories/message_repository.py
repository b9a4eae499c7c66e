"""Repository for the `messages` collection."""

from __future__ import annotations

from typing import Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection

from schemas.models.message import MessageDoc


class MessageRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    async def insert(self, message: MessageDoc) -> MessageDoc:
        result = await self._col.insert_one(message.to_mongo())
        return message.model_copy(update={"id": result.inserted_id})

    async def update_text(self, message_id: ObjectId, text: str) -> Optional[MessageDoc]:
        doc = await self._col.find_one_and_update(
            {"_id": message_id},
            {"$set": {"text": text, "edited": True}},
            return_document=ReturnDocument.AFTER,
        )
        return MessageDoc.from_mongo(doc)

    async def delete(self, message_id: ObjectId) -> Optional[MessageDoc]:
        return MessageDoc.from_mongo(
            await self._col.find_one_and_delete({"_id": message_id})
        )

    async def history_for(self, profile_id: str) -> list[MessageDoc]:
        """Every message the user sent or received, oldest first."""
        cursor = self._col.find(
            {"$or": [{"sender_id": profile_id}, {"receiver_id": profile_id}]}
        ).sort("created_at", 1)
        return [MessageDoc.from_mongo(doc) for doc in await cursor.to_list(None)]
