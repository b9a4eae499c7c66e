"""
Request DTOs for payment endpoints.

InitiatePaymentRequest — POST /api/payment/initiate
UpgradePreviewRequest  — POST /api/payment/upgrade
VerifyPaymentRequest   — POST /api/payment/verify
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class InitiatePaymentRequest(BaseModel):
    """``userId`` is the buyer's profile id; ``price`` is optional and must match the catalog."""

    model_config = ConfigDict(populate_by_name=True)

    plan: str = Field(min_length=1)
    user_id: str = Field(alias="userId", min_length=1)
    is_upgrade: bool = Field(default=False, alias="isUpgrade")
    price: Optional[int] = None


class UpgradePreviewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_plan: str = Field(alias="newPlan", min_length=1)
    user_id: str = Field(alias="userId", min_length=1)


class VerifyPaymentRequest(BaseModel):
    """Fields come straight from the gateway checkout callback.

    All optional at the schema level: missing ones are reported by the
    service as a single "Missing required verification fields" error.
    """

    model_config = ConfigDict(populate_by_name=True)

    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None
    payment_id: Optional[str] = Field(default=None, alias="paymentId")
