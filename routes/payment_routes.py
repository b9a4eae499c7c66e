"""
Payment routes.

POST /api/payment/initiate       — open a gateway order (new plan or upgrade)
POST /api/payment/upgrade        — proration preview, no side effects
POST /api/payment/verify         — gateway callback; activates the subscription
GET  /api/payment/total-revenue  — sum of paid orders (admin)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import get_payment_service, require_admin
from schemas.dto.requests.payment import (
    InitiatePaymentRequest,
    UpgradePreviewRequest,
    VerifyPaymentRequest,
)
from schemas.dto.responses.payment import (
    InitiatePaymentResponse,
    RevenueResponse,
    UpgradePreviewResponse,
    VerifyPaymentResponse,
)
from schemas.dto.responses.common import error_responses
from services.payment_service import PaymentService

router = APIRouter(
    prefix="/api/payment",
    tags=["payments"],
    responses=error_responses(400, 401, 403, 404, 409, 500),
)


@router.post("/initiate", response_model=InitiatePaymentResponse)
async def initiate_payment(
    body: InitiatePaymentRequest,
    payments: PaymentService = Depends(get_payment_service),
) -> InitiatePaymentResponse:
    result = await payments.initiate(
        body.user_id, body.plan, is_upgrade=body.is_upgrade, price=body.price
    )
    return InitiatePaymentResponse(**result)


@router.post("/upgrade", response_model=UpgradePreviewResponse)
async def preview_upgrade(
    body: UpgradePreviewRequest,
    payments: PaymentService = Depends(get_payment_service),
) -> UpgradePreviewResponse:
    return UpgradePreviewResponse(**await payments.preview_upgrade(body.user_id, body.new_plan))


@router.post("/verify", response_model=VerifyPaymentResponse)
async def verify_payment(
    body: VerifyPaymentRequest,
    payments: PaymentService = Depends(get_payment_service),
) -> VerifyPaymentResponse:
    payment = await payments.verify(
        body.razorpay_order_id,
        body.razorpay_payment_id,
        body.razorpay_signature,
        body.payment_id,
    )
    message = (
        f"Successfully upgraded to {payment.plan}"
        if payment.is_upgrade
        else "Payment verified and subscription updated"
    )
    return VerifyPaymentResponse(
        message=message, is_upgrade=payment.is_upgrade, new_plan=payment.plan
    )


@router.get(
    "/total-revenue",
    response_model=RevenueResponse,
    dependencies=[Depends(require_admin)],
)
async def total_revenue(
    payments: PaymentService = Depends(get_payment_service),
) -> RevenueResponse:
    return RevenueResponse(total_revenue=await payments.total_revenue())
