"""
Response DTOs for payment endpoints.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class UpgradeDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prorated_amount: int = Field(alias="proratedAmount")
    refund_amount: int = Field(alias="refundAmount")
    new_plan_price: int = Field(alias="newPlanPrice")
    remaining_days: int = Field(alias="remainingDays")


class InitiatePaymentResponse(BaseModel):
    """Response body for POST /api/payment/initiate."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    order: dict[str, Any]
    payment_id: str = Field(alias="paymentId")
    upgrade_details: Optional[UpgradeDetails] = Field(default=None, alias="upgradeDetails")


class UpgradePreviewResponse(BaseModel):
    """Response body for POST /api/payment/upgrade."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    current_plan: str = Field(alias="currentPlan")
    new_plan: str = Field(alias="newPlan")
    upgrade_details: UpgradeDetails = Field(alias="upgradeDetails")
    can_upgrade: bool = Field(default=True, alias="canUpgrade")


class VerifyPaymentResponse(BaseModel):
    """Response body for POST /api/payment/verify."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    is_upgrade: bool = Field(alias="isUpgrade")
    new_plan: str = Field(alias="newPlan")


class RevenueResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    total_revenue: int = Field(alias="totalRevenue")
    currency: str = "INR"
