"""
Subscription plan engine — catalog, proration, upgrade paths and commits.

The plan catalog and the pricing arithmetic are pure functions so the
payment coordinator can preview an upgrade without touching storage.

SubscriptionService.commit() applies a paid order to the user's embedded
subscription with an optimistic compare-and-set on subscription.version.
The write is also guarded on the payment id being absent from the
history, so a repeated commit for the same payment is a no-op.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from errors import AppError, InvalidUpgradePathError, NotFoundError, ValidationError
from repositories.user_repository import UserRepository
from schemas.models.payment import PaymentDoc
from schemas.models.user import (
    HISTORY_ACTIVE,
    HISTORY_EXPIRED,
    HISTORY_UPGRADED,
    PLAN_FREE,
    PLAN_PREMIUM,
    PLAN_PREMIUM_PLUS,
    Subscription,
    SubscriptionDetails,
    SubscriptionHistoryEntry,
    UserDoc,
)
from shared.datetime_utils import remaining_days, utc_now
from shared.logging import get_logger

log = get_logger(__name__)

MAX_COMMIT_ATTEMPTS = 5


@dataclass(frozen=True)
class PlanSpec:
    name: str
    price: int
    duration_days: int


PLANS: dict[str, PlanSpec] = {
    PLAN_FREE: PlanSpec(PLAN_FREE, 0, 0),
    PLAN_PREMIUM: PlanSpec(PLAN_PREMIUM, 2999, 90),
    PLAN_PREMIUM_PLUS: PlanSpec(PLAN_PREMIUM_PLUS, 4999, 180),
}

UPGRADE_PATHS: dict[str, tuple[str, ...]] = {
    PLAN_FREE: (PLAN_PREMIUM, PLAN_PREMIUM_PLUS),
    PLAN_PREMIUM: (PLAN_PREMIUM_PLUS,),
    PLAN_PREMIUM_PLUS: (),
}


@dataclass(frozen=True)
class Proration:
    prorated_amount: int
    refund_amount: int
    new_plan_price: int
    remaining_days: int


def normalize_plan(name: str) -> str:
    """Catalog key for a client-supplied plan name ("Premium Plus" -> "premium_plus")."""
    return "_".join(str(name).strip().lower().split())


def get_plan(name: str) -> PlanSpec:
    plan = PLANS.get(normalize_plan(name))
    if plan is None:
        raise ValidationError("Invalid plan selected", field="plan")
    return plan


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (3999.5 -> 4000, -0.5 -> 0)."""
    return int(math.floor(value + 0.5))


def compute_proration(current: str, new: str, days_left: int) -> Proration:
    """Price of moving from *current* to *new* with *days_left* unused days."""
    current_plan = get_plan(current)
    new_plan = get_plan(new)

    if current_plan.name == PLAN_FREE or current_plan.duration_days == 0:
        return Proration(
            prorated_amount=new_plan.price,
            refund_amount=0,
            new_plan_price=new_plan.price,
            remaining_days=days_left,
        )

    daily_rate = current_plan.price / current_plan.duration_days
    refund = daily_rate * max(0, days_left)
    prorated = max(0.0, new_plan.price - refund)
    return Proration(
        prorated_amount=round_half_up(prorated),
        refund_amount=round_half_up(refund),
        new_plan_price=new_plan.price,
        remaining_days=days_left,
    )


def validate_upgrade_path(current: str, new: str) -> None:
    if new not in UPGRADE_PATHS.get(current, ()):
        raise InvalidUpgradePathError(
            f"Cannot upgrade from {current} to {new}", field="newPlan"
        )


def has_active_subscription(user: UserDoc, now: Optional[datetime] = None) -> bool:
    now = now or utc_now()
    expiry = user.subscription.details.expiry_date
    return (
        user.subscription.current != PLAN_FREE
        and expiry is not None
        and expiry > now
    )


def subscription_remaining_days(user: UserDoc, now: Optional[datetime] = None) -> int:
    return remaining_days(user.subscription.details.expiry_date, now or utc_now())


def apply_payment(
    subscription: Subscription, payment: PaymentDoc, now: datetime
) -> Subscription:
    """Return the subscription that results from committing *payment* at *now*."""
    plan = get_plan(payment.plan)
    expiry = now + timedelta(days=plan.duration_days)

    history: list[SubscriptionHistoryEntry] = []
    for entry in subscription.history:
        if entry.status == HISTORY_ACTIVE:
            if payment.is_upgrade:
                entry = entry.model_copy(
                    update={"status": HISTORY_UPGRADED, "upgraded_at": now}
                )
            else:
                # Lapsed period the expiry sweep has not reached yet
                entry = entry.model_copy(update={"status": HISTORY_EXPIRED})
        history.append(entry)

    history.append(
        SubscriptionHistoryEntry(
            plan=plan.name,
            start_date=now,
            expiry_date=expiry,
            payment_id=payment.id,
            status=HISTORY_ACTIVE,
            is_upgrade=payment.is_upgrade,
            original_plan=payment.original_plan,
            prorated_amount=payment.prorated_amount if payment.is_upgrade else None,
        )
    )

    return Subscription(
        current=plan.name,
        details=SubscriptionDetails(
            start_date=now,
            expiry_date=expiry,
            payment_id=payment.id,
            auto_renew=subscription.details.auto_renew,
        ),
        history=history,
        version=subscription.version + 1,
    )


class SubscriptionService:
    def __init__(self, user_repo: UserRepository) -> None:
        self._users = user_repo

    async def commit(
        self, payment: PaymentDoc, now: Optional[datetime] = None
    ) -> Subscription:
        """Activate the plan bought by *payment* on its owner.

        Returns the subscription as stored after the call. Committing the
        same payment twice leaves a single history entry for it.
        """
        now = now or utc_now()

        for attempt in range(1, MAX_COMMIT_ATTEMPTS + 1):
            user = await self._users.find_by_id(payment.user_id)
            if user is None:
                raise NotFoundError("User not found")

            current = user.subscription
            if any(entry.payment_id == payment.id for entry in current.history):
                log.info(
                    "subscription_commit_skipped",
                    reason="already_committed",
                    payment_id=str(payment.id),
                )
                return current

            updated = apply_payment(current, payment, now)
            written = await self._users.compare_and_set_subscription(
                user.id,
                current.version,
                updated.model_dump(),
                payment_id=payment.id,
            )
            if written:
                log.info(
                    "subscription_committed",
                    user_id=str(user.id),
                    plan=updated.current,
                    is_upgrade=payment.is_upgrade,
                    payment_id=str(payment.id),
                    version=updated.version,
                )
                return updated

            log.warning(
                "subscription_commit_conflict",
                user_id=str(user.id),
                attempt=attempt,
            )

        log.error(
            "subscription_commit_failed",
            user_id=str(payment.user_id),
            payment_id=str(payment.id),
        )
        raise AppError("Could not update subscription")

    async def expire_lapsed(self, now: Optional[datetime] = None) -> int:
        """Move every user whose paid plan has run out back to free."""
        now = now or utc_now()
        expired = 0
        for user in await self._users.find_lapsed_subscriptions(now):
            try:
                if await self._users.expire_subscription(user):
                    expired += 1
            except Exception as e:
                log.error(
                    "subscription_expiry_failed",
                    user_id=str(user.id),
                    error=str(e),
                    error_type=type(e).__name__,
                )
        if expired:
            log.info("subscriptions_expired", count=expired)
        return expired
