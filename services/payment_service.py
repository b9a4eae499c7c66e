"""
PaymentService — order initiation, upgrade previews and payment verification.

Flow: initiate() prices the purchase (catalog price or prorated upgrade),
opens a gateway order and stores a `created` payment. verify() checks the
gateway signature before touching anything, flips the payment to `paid`
with a conditional update, then hands it to SubscriptionService.commit().

A payment that is already `paid` is re-committed rather than rejected:
the commit is idempotent, so a verify retried after a crash between the
two writes completes the subscription instead of leaving it behind.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any, Optional

from bson import ObjectId

from config import RazorpaySettings
from errors import (
    AlreadySubscribedError,
    ConflictError,
    InvalidSignatureError,
    NotFoundError,
    ValidationError,
)
from infrastructure.payments.protocol import PaymentGateway
from repositories.payment_repository import PaymentRepository
from repositories.user_repository import UserRepository
from schemas.models.payment import PAYMENT_FAILED, PAYMENT_PAID, PaymentDoc
from schemas.models.user import PLAN_FREE, UserDoc
from services.subscription_service import (
    SubscriptionService,
    compute_proration,
    get_plan,
    has_active_subscription,
    subscription_remaining_days,
    validate_upgrade_path,
)
from shared.datetime_utils import utc_now
from shared.generators import generate_receipt
from shared.logging import get_logger

log = get_logger(__name__)


def _parse_object_id(value: str, field: str) -> ObjectId:
    if not ObjectId.is_valid(value):
        raise ValidationError(f"Invalid {field}", field=field)
    return ObjectId(value)


class PaymentService:
    def __init__(
        self,
        payment_repo: PaymentRepository,
        user_repo: UserRepository,
        subscription_service: SubscriptionService,
        gateway: PaymentGateway,
        settings: RazorpaySettings,
    ) -> None:
        self._payments = payment_repo
        self._users = user_repo
        self._subscriptions = subscription_service
        self._gateway = gateway
        self._settings = settings

    async def _get_user(self, profile_id: str) -> UserDoc:
        user = await self._users.find_by_profile_id(profile_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def initiate(
        self,
        profile_id: str,
        plan: str,
        is_upgrade: bool = False,
        price: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> dict[str, Any]:
        """Open a gateway order for *plan* and record a `created` payment.

        Returns ``order`` (the gateway object), ``payment_id`` and, for
        upgrades, ``upgrade_details``.
        """
        now = now or utc_now()
        target = get_plan(plan)
        if target.name == PLAN_FREE:
            raise ValidationError("Invalid plan selected", field="plan")

        user = await self._get_user(profile_id)
        current = user.subscription.current or PLAN_FREE
        active = has_active_subscription(user, now)

        upgrade_details: Optional[dict[str, Any]] = None
        if is_upgrade:
            validate_upgrade_path(current, target.name)
            days_left = subscription_remaining_days(user, now) if active else 0
            proration = compute_proration(
                current if active else PLAN_FREE, target.name, days_left
            )
            amount = proration.prorated_amount
            upgrade_details = asdict(proration)
            receipt = generate_receipt("upgrade")
        else:
            if active:
                log.warning(
                    "payment_initiate_rejected",
                    reason="already_subscribed",
                    profile_id=profile_id,
                    current_plan=current,
                )
                raise AlreadySubscribedError(
                    "You already have an active subscription. "
                    "Please upgrade your current plan instead.",
                    details={
                        "currentPlan": current,
                        "expiryDate": user.subscription.details.expiry_date.isoformat(),
                        "canUpgrade": True,
                    },
                )
            if price is not None and price != target.price:
                raise ValidationError("Invalid price value", field="price")
            amount = target.price
            receipt = generate_receipt("receipt")

        order = await self._gateway.create_order(
            amount * 100, self._settings.razorpay_currency, receipt
        )

        payment = PaymentDoc(
            user_id=user.id,
            plan=target.name,
            price=amount,
            currency=self._settings.razorpay_currency,
            gateway_order_id=order["id"],
            is_upgrade=is_upgrade,
            created_at=now,
            updated_at=now,
        )
        if is_upgrade:
            payment = payment.model_copy(
                update={
                    "original_plan": current,
                    "upgrade_type": f"{current}_to_{target.name}",
                    "prorated_amount": amount,
                    "remaining_days": upgrade_details["remaining_days"],
                    "original_price": target.price,
                }
            )
        payment_id = await self._payments.insert(payment)

        log.info(
            "payment_initiated",
            payment_id=str(payment_id),
            user_id=str(user.id),
            plan=target.name,
            amount=amount,
            is_upgrade=is_upgrade,
        )
        result: dict[str, Any] = {"order": order, "payment_id": str(payment_id)}
        if upgrade_details is not None:
            result["upgrade_details"] = upgrade_details
        return result

    async def preview_upgrade(
        self, profile_id: str, new_plan: str, now: Optional[datetime] = None
    ) -> dict[str, Any]:
        """What moving to *new_plan* would cost right now. Writes nothing."""
        now = now or utc_now()
        target = get_plan(new_plan)
        user = await self._get_user(profile_id)
        current = user.subscription.current or PLAN_FREE
        validate_upgrade_path(current, target.name)

        active = has_active_subscription(user, now)
        days_left = subscription_remaining_days(user, now) if active else 0
        proration = compute_proration(
            current if active else PLAN_FREE, target.name, days_left
        )
        return {
            "current_plan": current,
            "new_plan": target.name,
            "upgrade_details": asdict(proration),
            "can_upgrade": True,
        }

    async def verify(
        self,
        order_ref: Optional[str],
        payment_ref: Optional[str],
        signature: Optional[str],
        payment_id: Optional[str],
        now: Optional[datetime] = None,
    ) -> PaymentDoc:
        """Confirm a completed checkout and activate the subscription.

        Raises:
            ValidationError: a field is missing.
            InvalidSignatureError: bad HMAC, or the order is not this payment's.
            NotFoundError: unknown payment, or its user is gone.
            ConflictError: the payment was marked failed.
        """
        if not (order_ref and payment_ref and signature and payment_id):
            raise ValidationError("Missing required verification fields")

        if not self._gateway.verify_signature(order_ref, payment_ref, signature):
            log.warning("payment_signature_invalid", payment_id=payment_id)
            raise InvalidSignatureError()

        oid = _parse_object_id(payment_id, "paymentId")
        payment = await self._payments.find_by_id(oid)
        if payment is None:
            raise NotFoundError("Payment not found")

        if payment.gateway_order_id != order_ref:
            log.warning(
                "payment_order_mismatch",
                payment_id=payment_id,
                order_id=order_ref,
            )
            raise InvalidSignatureError()

        if payment.status == PAYMENT_FAILED:
            raise ConflictError("Payment has already failed")

        paid = await self._payments.mark_paid(oid, payment_ref, signature)
        if paid is None:
            # Lost the created -> paid race, or a retry of a verified order
            paid = await self._payments.find_by_id(oid)
            if paid is None or paid.status != PAYMENT_PAID:
                raise ConflictError("Payment is not awaiting verification")
            log.info("payment_already_paid", payment_id=payment_id)
        else:
            log.info(
                "payment_verified",
                payment_id=payment_id,
                user_id=str(paid.user_id),
                plan=paid.plan,
            )

        await self._subscriptions.commit(paid, now=now)
        return paid

    async def total_revenue(self) -> int:
        return await self._payments.total_revenue()
