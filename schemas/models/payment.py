"""
Payment order document model.

Maps to the `payments` MongoDB collection.

One document per attempted transaction. status moves created → paid only
after the gateway signature has been verified, and never regresses from
paid. The upgrade fields are only populated when is_upgrade is True.
"""

from __future__ import annotations

from typing import Optional

from schemas.models.base import MongoBaseModel, PyObjectId, UtcDatetime

PAYMENT_CREATED = "created"
PAYMENT_PAID = "paid"
PAYMENT_FAILED = "failed"


class PaymentDoc(MongoBaseModel):
    """Document model for the `payments` collection."""

    user_id: PyObjectId
    plan: str
    price: int
    currency: str = "INR"
    gateway_order_id: str
    gateway_payment_id: Optional[str] = None
    signature: Optional[str] = None
    status: str = PAYMENT_CREATED

    is_upgrade: bool = False
    original_plan: Optional[str] = None
    upgrade_type: Optional[str] = None  # e.g. "premium_to_premium_plus"
    prorated_amount: Optional[int] = None
    remaining_days: Optional[int] = None
    original_price: Optional[int] = None

    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None
