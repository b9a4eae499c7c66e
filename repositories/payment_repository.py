"""
Repository for the `payments` collection.

mark_paid() is the created → paid compare-and-set: it only matches orders
still in `created`, so a second verify of the same order cannot transition
it again.
"""

from __future__ import annotations

from typing import Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection

from schemas.models.payment import (
    PAYMENT_CREATED,
    PAYMENT_PAID,
    PaymentDoc,
)
from shared.datetime_utils import utc_now


class PaymentRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    async def insert(self, payment: PaymentDoc) -> ObjectId:
        result = await self._col.insert_one(payment.to_mongo())
        return result.inserted_id

    async def find_by_id(self, payment_id: ObjectId) -> Optional[PaymentDoc]:
        return PaymentDoc.from_mongo(await self._col.find_one({"_id": payment_id}))

    async def mark_paid(
        self, payment_id: ObjectId, gateway_payment_id: str, signature: str
    ) -> Optional[PaymentDoc]:
        doc = await self._col.find_one_and_update(
            {"_id": payment_id, "status": PAYMENT_CREATED},
            {
                "$set": {
                    "status": PAYMENT_PAID,
                    "gateway_payment_id": gateway_payment_id,
                    "signature": signature,
                    "updated_at": utc_now(),
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        return PaymentDoc.from_mongo(doc)

    async def total_revenue(self) -> int:
        cursor = await self._col.aggregate(
            [
                {"$match": {"status": PAYMENT_PAID}},
                {"$group": {"_id": None, "total": {"$sum": "$price"}}},
            ]
        )
        rows = await cursor.to_list(None)
        return rows[0]["total"] if rows else 0
