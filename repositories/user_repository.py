"""
Repository for the `users` and `profile-history` collections.

Subscription writes go through compare_and_set_subscription(), which only
applies when the stored version still matches and the payment has not
already been recorded in the history.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection

from schemas.models.user import (
    HISTORY_ACTIVE,
    HISTORY_EXPIRED,
    PLAN_FREE,
    UserDoc,
)
from shared.datetime_utils import utc_now


class UserRepository:
    def __init__(
        self, collection: AsyncCollection, history_collection: AsyncCollection
    ) -> None:
        self._col = collection
        self._history = history_collection

    # ── Lookups ──────────────────────────────────────────────────────────────

    async def find_by_id(self, user_id: ObjectId) -> Optional[UserDoc]:
        return UserDoc.from_mongo(await self._col.find_one({"_id": user_id}))

    async def find_by_profile_id(self, profile_id: str) -> Optional[UserDoc]:
        return UserDoc.from_mongo(await self._col.find_one({"profile_id": profile_id}))

    async def find_by_email(self, email: str) -> Optional[UserDoc]:
        return UserDoc.from_mongo(
            await self._col.find_one({"personal_info.email": email})
        )

    async def exists(self, profile_id: str) -> bool:
        return (
            await self._col.count_documents({"profile_id": profile_id}, limit=1)
        ) > 0

    async def find_verified_by_profile_ids(self, profile_ids: list[str]) -> list[UserDoc]:
        if not profile_ids:
            return []
        cursor = self._col.find(
            {"profile_id": {"$in": profile_ids}, "email_verified": True}
        )
        return [UserDoc.from_mongo(doc) for doc in await cursor.to_list(None)]

    async def find_by_profile_ids(self, profile_ids: list[str]) -> list[UserDoc]:
        if not profile_ids:
            return []
        cursor = self._col.find({"profile_id": {"$in": profile_ids}})
        return [UserDoc.from_mongo(doc) for doc in await cursor.to_list(None)]

    async def find_recent_verified(
        self, exclude_profile_id: str, gender: str, limit: int = 3
    ) -> list[UserDoc]:
        cursor = (
            self._col.find(
                {
                    "profile_id": {"$ne": exclude_profile_id},
                    "personal_info.gender": gender,
                    "email_verified": True,
                }
            )
            .sort("created_at", -1)
            .limit(limit)
        )
        return [UserDoc.from_mongo(doc) for doc in await cursor.to_list(None)]

    async def find_ids(self, roles: Optional[tuple[str, ...]] = None) -> list[ObjectId]:
        """_ids of every user, or of users holding one of *roles*."""
        query = {"role": {"$in": list(roles)}} if roles else {}
        cursor = self._col.find(query, {"_id": 1})
        return [doc["_id"] for doc in await cursor.to_list(None)]

    # ── Writes ───────────────────────────────────────────────────────────────

    async def insert(self, user: UserDoc) -> ObjectId:
        result = await self._col.insert_one(user.to_mongo())
        return result.inserted_id

    async def update_fields(self, user_id: ObjectId, fields: dict[str, Any]) -> bool:
        result = await self._col.update_one({"_id": user_id}, {"$set": fields})
        return result.matched_count > 0

    async def update_by_profile_id(
        self, profile_id: str, fields: dict[str, Any]
    ) -> Optional[UserDoc]:
        doc = await self._col.find_one_and_update(
            {"profile_id": profile_id},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return UserDoc.from_mongo(doc)

    async def delete_by_profile_id(self, profile_id: str) -> Optional[UserDoc]:
        return UserDoc.from_mongo(
            await self._col.find_one_and_delete({"profile_id": profile_id})
        )

    async def set_password_hash(self, user_id: ObjectId, password_hash: str) -> bool:
        return await self.update_fields(
            user_id, {"credentials.password_hash": password_hash}
        )

    async def touch_last_active(self, user_id: ObjectId) -> None:
        await self._col.update_one(
            {"_id": user_id}, {"$set": {"last_active": utc_now()}}
        )

    async def add_chat_contact(self, profile_id: str, contact_id: str) -> bool:
        result = await self._col.update_one(
            {"profile_id": profile_id}, {"$addToSet": {"chat_contacts": contact_id}}
        )
        return result.matched_count > 0

    async def add_registered_event(self, user_id: ObjectId, event_id: ObjectId) -> None:
        await self._col.update_one(
            {"_id": user_id}, {"$addToSet": {"registered_events": event_id}}
        )

    async def remove_registered_event(
        self, user_id: ObjectId, event_id: ObjectId
    ) -> None:
        await self._col.update_one(
            {"_id": user_id}, {"$pull": {"registered_events": event_id}}
        )

    async def snapshot(self, user: UserDoc) -> None:
        """Copy the current profile into `profile-history` before an edit."""
        await self._history.insert_one(
            {
                "user_id": user.id,
                "profile_id": user.profile_id,
                "snapshot": user.model_dump(
                    by_alias=True, exclude={"credentials", "subscription"}
                ),
                "created_at": utc_now(),
            }
        )

    # ── Subscription ─────────────────────────────────────────────────────────

    async def compare_and_set_subscription(
        self,
        user_id: ObjectId,
        expected_version: int,
        subscription: dict[str, Any],
        payment_id: Optional[ObjectId] = None,
    ) -> bool:
        """Replace the embedded subscription iff nobody wrote it in between.

        Returns False when the version moved (caller re-reads and retries) or
        when *payment_id* is already part of the history.
        """
        query: dict[str, Any] = {"_id": user_id}
        if expected_version == 0:
            # Documents written before versioning have no counter at all
            query["subscription.version"] = {"$in": [0, None]}
        else:
            query["subscription.version"] = expected_version
        if payment_id is not None:
            query["subscription.history.payment_id"] = {"$ne": payment_id}
        result = await self._col.update_one(query, {"$set": {"subscription": subscription}})
        return result.modified_count > 0

    async def find_lapsed_subscriptions(self, now: datetime) -> list[UserDoc]:
        cursor = self._col.find(
            {
                "subscription.current": {"$ne": PLAN_FREE},
                "subscription.details.expiry_date": {"$lte": now},
            }
        )
        return [UserDoc.from_mongo(doc) for doc in await cursor.to_list(None)]

    async def expire_subscription(self, user: UserDoc) -> bool:
        """Fall back to the free plan, marking the active period expired."""
        sub = user.subscription
        history = [
            entry.model_copy(update={"status": HISTORY_EXPIRED})
            if entry.status == HISTORY_ACTIVE
            else entry
            for entry in sub.history
        ]
        updated = sub.model_copy(
            update={
                "current": PLAN_FREE,
                "history": history,
                "version": sub.version + 1,
            }
        )
        return await self.compare_and_set_subscription(
            user.id, sub.version, updated.model_dump()
        )
