"""Repository for the `stories` collection."""

from __future__ import annotations

from pymongo.asynchronous.collection import AsyncCollection

from schemas.models.story import StoryDoc


class StoryRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    async def insert(self, story: StoryDoc) -> StoryDoc:
        result = await self._col.insert_one(story.to_mongo())
        return story.model_copy(update={"id": result.inserted_id})

    async def list_recent(self) -> list[StoryDoc]:
        cursor = self._col.find({}).sort("created_at", -1)
        return [StoryDoc.from_mongo(doc) for doc in await cursor.to_list(None)]
