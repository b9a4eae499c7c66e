"""
Repository for the `verification-tokens` collection (OTP challenges).

One document per (email, purpose). Issuing a code replaces the whole
challenge, which resets the attempt counter and drops any reset-token hash
bound to the previous code.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection

from schemas.models.token import PURPOSE_PASSWORD_RESET, OtpChallengeDoc
from shared.datetime_utils import utc_now


class OtpChallengeRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    async def find(self, email: str, purpose: str) -> Optional[OtpChallengeDoc]:
        return OtpChallengeDoc.from_mongo(
            await self._col.find_one({"email": email, "purpose": purpose})
        )

    async def replace_challenge(
        self,
        email: str,
        purpose: str,
        code_hash: str,
        expires_at: datetime,
        user_id: Optional[ObjectId] = None,
    ) -> None:
        challenge = OtpChallengeDoc(
            email=email,
            purpose=purpose,
            user_id=user_id,
            code_hash=code_hash,
            expires_at=expires_at,
            verified=False,
            attempts=0,
            reset_token_hash=None,
            created_at=utc_now(),
        )
        await self._col.replace_one(
            {"email": email, "purpose": purpose}, challenge.to_mongo(), upsert=True
        )

    async def record_failed_attempt(
        self, challenge_id: ObjectId, max_attempts: int
    ) -> Optional[int]:
        """Atomically bump the attempt counter while it is below *max_attempts*.

        Returns the new count, or None if the ceiling was already reached.
        """
        doc = await self._col.find_one_and_update(
            {"_id": challenge_id, "attempts": {"$lt": max_attempts}},
            {"$inc": {"attempts": 1}},
            return_document=ReturnDocument.AFTER,
        )
        return doc["attempts"] if doc else None

    async def mark_verified(self, challenge_id: ObjectId) -> None:
        await self._col.update_one(
            {"_id": challenge_id}, {"$set": {"verified": True, "attempts": 0}}
        )

    async def set_reset_token_hash(self, user_id: ObjectId, token_hash: str) -> bool:
        result = await self._col.update_one(
            {"user_id": user_id, "purpose": PURPOSE_PASSWORD_RESET},
            {"$set": {"reset_token_hash": token_hash}},
        )
        return result.matched_count > 0

    async def consume_reset_token(
        self, user_id: ObjectId, token_hash: str
    ) -> Optional[OtpChallengeDoc]:
        """Delete the reset challenge iff *token_hash* is the one on file."""
        doc = await self._col.find_one_and_delete(
            {
                "user_id": user_id,
                "purpose": PURPOSE_PASSWORD_RESET,
                "reset_token_hash": token_hash,
            }
        )
        return OtpChallengeDoc.from_mongo(doc)

    async def delete(self, email: str, purpose: str) -> None:
        await self._col.delete_one({"email": email, "purpose": purpose})
