"""Repository for the `reports` collection."""

from __future__ import annotations

from bson import ObjectId
from pymongo.asynchronous.collection import AsyncCollection

from schemas.models.report import ReportDoc


class ReportRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    async def insert(self, report: ReportDoc) -> ObjectId:
        """Insert *report*; raises DuplicateKeyError for a repeated pair."""
        result = await self._col.insert_one(report.to_mongo())
        return result.inserted_id

    async def exists(self, reporting_user_id: str, reported_profile_id: str) -> bool:
        count = await self._col.count_documents(
            {
                "reporting_user_id": reporting_user_id,
                "reported_profile_id": reported_profile_id,
            },
            limit=1,
        )
        return count > 0

    async def list_recent(self, limit: int = 100) -> list[ReportDoc]:
        cursor = self._col.find({}).sort("created_at", -1).limit(limit)
        return [ReportDoc.from_mongo(doc) for doc in await cursor.to_list(None)]
