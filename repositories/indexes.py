"""
Collection names and index bootstrap.

ensure_indexes() runs once in the app lifespan. Uniqueness rules the core
relies on (one interest record per source, one challenge per email and
purpose, one report per pair) are enforced here, not in application code.
"""

from __future__ import annotations

from pymongo import ASCENDING, DESCENDING
from pymongo.asynchronous.database import AsyncDatabase

from shared.logging import get_logger

log = get_logger(__name__)

USERS = "users"
PROFILE_HISTORY = "profile-history"
VERIFICATION_TOKENS = "verification-tokens"
PAYMENTS = "payments"
INTERESTS = "interests"
MESSAGES = "messages"
EVENTS = "events"
REPORTS = "reports"
NOTIFICATIONS = "notifications"
STORIES = "stories"


async def ensure_indexes(db: AsyncDatabase) -> None:
    await db[USERS].create_index("profile_id", unique=True)
    await db[USERS].create_index("personal_info.email", unique=True)
    await db[USERS].create_index(
        [("personal_info.gender", ASCENDING), ("created_at", DESCENDING)]
    )
    await db[USERS].create_index("subscription.details.expiry_date")

    await db[PROFILE_HISTORY].create_index("profile_id")

    await db[VERIFICATION_TOKENS].create_index(
        [("email", ASCENDING), ("purpose", ASCENDING)], unique=True
    )
    await db[VERIFICATION_TOKENS].create_index("user_id")

    await db[PAYMENTS].create_index("user_id")
    await db[PAYMENTS].create_index("gateway_order_id")

    await db[INTERESTS].create_index("user_profile_id", unique=True)
    await db[INTERESTS].create_index("interested_profiles.profile_id")

    await db[MESSAGES].create_index([("sender_id", ASCENDING), ("created_at", ASCENDING)])
    await db[MESSAGES].create_index(
        [("receiver_id", ASCENDING), ("created_at", ASCENDING)]
    )

    await db[EVENTS].create_index("status")

    await db[REPORTS].create_index(
        [("reporting_user_id", ASCENDING), ("reported_profile_id", ASCENDING)],
        unique=True,
    )

    await db[NOTIFICATIONS].create_index(
        [("user_id", ASCENDING), ("created_at", DESCENDING)]
    )
    await db[NOTIFICATIONS].create_index("event_id")

    await db[STORIES].create_index([("created_at", DESCENDING)])
    log.info("mongo_indexes_ensured")
