"""
Unit test configuration.

Patches dotenv so pydantic-settings never reads the project's real .env file
during unit tests. Tests control config exclusively through monkeypatch.setenv().

Repositories run against mongomock wrapped in a small async facade that
exposes the slice of pymongo's AsyncCollection API the repositories use.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import mongomock
import pytest

from config import JWTSettings
from repositories.event_repository import EventRepository
from repositories.indexes import (
    EVENTS,
    INTERESTS,
    MESSAGES,
    NOTIFICATIONS,
    PAYMENTS,
    PROFILE_HISTORY,
    REPORTS,
    STORIES,
    USERS,
    VERIFICATION_TOKENS,
)
from repositories.interest_repository import InterestRepository
from repositories.message_repository import MessageRepository
from repositories.notification_repository import NotificationRepository
from repositories.payment_repository import PaymentRepository
from repositories.report_repository import ReportRepository
from repositories.story_repository import StoryRepository
from repositories.token_repository import OtpChallengeRepository
from repositories.user_repository import UserRepository
from schemas.models.user import UserDoc
from tests.unit.factories import build_user


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    """Prevent pydantic-settings from loading .env files in all unit tests."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})


# ── Async mongomock facade ───────────────────────────────────────────────────


def _naive_utc(value: Any) -> Any:
    """Stored datetimes are naive UTC; align query and update values with them."""
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    if isinstance(value, dict):
        return {k: _naive_utc(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_naive_utc(v) for v in value]
    return value


class AsyncMockCursor:
    def __init__(self, cursor) -> None:
        self._cursor = cursor

    def sort(self, *args, **kwargs) -> "AsyncMockCursor":
        self._cursor = self._cursor.sort(*args, **kwargs)
        return self

    def limit(self, n: int) -> "AsyncMockCursor":
        self._cursor = self._cursor.limit(n)
        return self

    async def to_list(self, length=None) -> list[dict]:
        docs = list(self._cursor)
        return docs if length is None else docs[:length]


class AsyncMockCollection:
    def __init__(self, collection) -> None:
        self._col = collection

    def find(self, *args, **kwargs) -> AsyncMockCursor:
        args = tuple(_naive_utc(a) for a in args)
        return AsyncMockCursor(self._col.find(*args, **kwargs))

    async def aggregate(self, pipeline, **kwargs) -> AsyncMockCursor:
        return AsyncMockCursor(iter(list(self._col.aggregate(_naive_utc(pipeline), **kwargs))))

    def __getattr__(self, name: str):
        method = getattr(self._col, name)

        async def call(*args, **kwargs):
            args = tuple(_naive_utc(a) for a in args)
            return method(*args, **kwargs)

        return call


class AsyncMockDatabase:
    def __init__(self, db) -> None:
        self._db = db

    def __getitem__(self, name: str) -> AsyncMockCollection:
        return AsyncMockCollection(self._db[name])


@pytest.fixture
def mongo_db() -> AsyncMockDatabase:
    return AsyncMockDatabase(mongomock.MongoClient(tz_aware=True)["matrimony-test"])


# ── Repositories ─────────────────────────────────────────────────────────────


@pytest.fixture
def user_repo(mongo_db) -> UserRepository:
    mongo_db._db[USERS].create_index("profile_id", unique=True)
    mongo_db._db[USERS].create_index("personal_info.email", unique=True)
    return UserRepository(mongo_db[USERS], mongo_db[PROFILE_HISTORY])


@pytest.fixture
def challenge_repo(mongo_db) -> OtpChallengeRepository:
    mongo_db._db[VERIFICATION_TOKENS].create_index(
        [("email", 1), ("purpose", 1)], unique=True
    )
    return OtpChallengeRepository(mongo_db[VERIFICATION_TOKENS])


@pytest.fixture
def payment_repo(mongo_db) -> PaymentRepository:
    return PaymentRepository(mongo_db[PAYMENTS])


@pytest.fixture
def interest_repo(mongo_db) -> InterestRepository:
    mongo_db._db[INTERESTS].create_index("user_profile_id", unique=True)
    return InterestRepository(mongo_db[INTERESTS])


@pytest.fixture
def message_repo(mongo_db) -> MessageRepository:
    return MessageRepository(mongo_db[MESSAGES])


@pytest.fixture
def event_repo(mongo_db) -> EventRepository:
    return EventRepository(mongo_db[EVENTS])


@pytest.fixture
def report_repo(mongo_db) -> ReportRepository:
    mongo_db._db[REPORTS].create_index(
        [("reporting_user_id", 1), ("reported_profile_id", 1)], unique=True
    )
    return ReportRepository(mongo_db[REPORTS])


@pytest.fixture
def notification_repo(mongo_db) -> NotificationRepository:
    return NotificationRepository(mongo_db[NOTIFICATIONS])


@pytest.fixture
def story_repo(mongo_db) -> StoryRepository:
    return StoryRepository(mongo_db[STORIES])


@pytest.fixture
def jwt_settings() -> JWTSettings:
    return JWTSettings(jwt_secret="session-secret", reset_jwt_secret="reset-secret")


# ── Seed data ────────────────────────────────────────────────────────────────
@pytest.fixture
def seed_user(user_repo):
    """Insert a user and return it with its generated _id."""

    async def _seed(profile_id: str, **overrides: Any) -> UserDoc:
        user = build_user(profile_id, **overrides)
        user_id = await user_repo.insert(user)
        return user.model_copy(update={"id": user_id})

    return _seed
