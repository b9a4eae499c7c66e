"""
Repository for the `interests` collection.

Each list is treated as a set keyed by profile_id. Adds are a conditional
single-document $push (only when no entry with that profile_id exists), so
concurrent toggles by the same source never produce duplicates or lost
updates.
"""

from __future__ import annotations

from typing import Optional

from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import DuplicateKeyError

from schemas.models.interest import InterestDoc
from shared.datetime_utils import utc_now

INTERESTED = "interested_profiles"
PASSED = "passed_profiles"


class InterestRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    async def find(self, source_profile_id: str) -> Optional[InterestDoc]:
        return InterestDoc.from_mongo(
            await self._col.find_one({"user_profile_id": source_profile_id})
        )

    async def _ensure_record(self, source_profile_id: str) -> None:
        now = utc_now()
        try:
            await self._col.update_one(
                {"user_profile_id": source_profile_id},
                {
                    "$setOnInsert": {
                        INTERESTED: [],
                        PASSED: [],
                        "created_at": now,
                    }
                },
                upsert=True,
            )
        except DuplicateKeyError:
            # A concurrent upsert created the record first
            pass

    async def add_entry(self, source_profile_id: str, field: str, target: str) -> bool:
        """Add *target* to *field*; returns False if it was already present."""
        await self._ensure_record(source_profile_id)
        now = utc_now()
        result = await self._col.update_one(
            {
                "user_profile_id": source_profile_id,
                f"{field}.profile_id": {"$ne": target},
            },
            {
                "$push": {field: {"profile_id": target, "created_at": now}},
                "$set": {"updated_at": now},
            },
        )
        return result.modified_count > 0

    async def remove_entry(self, source_profile_id: str, field: str, target: str) -> bool:
        """Remove *target* from *field*; returns False if it was not present."""
        result = await self._col.update_one(
            {"user_profile_id": source_profile_id, f"{field}.profile_id": target},
            {
                "$pull": {field: {"profile_id": target}},
                "$set": {"updated_at": utc_now()},
            },
        )
        return result.modified_count > 0

    async def clear(self, source_profile_id: str, field: str) -> int:
        result = await self._col.update_one(
            {"user_profile_id": source_profile_id},
            {"$set": {field: [], "updated_at": utc_now()}},
        )
        return result.modified_count

    async def find_sources_targeting(self, target_profile_id: str) -> list[str]:
        """Profile ids of every source whose interested set contains *target*."""
        cursor = self._col.find(
            {f"{INTERESTED}.profile_id": target_profile_id},
            {"user_profile_id": 1},
        )
        return [doc["user_profile_id"] for doc in await cursor.to_list(None)]

    async def delete_record(self, source_profile_id: str) -> bool:
        result = await self._col.delete_one({"user_profile_id": source_profile_id})
        return result.deleted_count > 0
