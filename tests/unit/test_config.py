"""Unit tests for AppSettings and sub-configs."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from config import (
    AppSettings,
    DatabaseSettings,
    JWTSettings,
    RazorpaySettings,
    RedisSettings,
    SchedulerSettings,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def with_mongo(monkeypatch):
    """Set the required MONGODB_URI so AppSettings can be instantiated."""
    monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
    return monkeypatch


# ---------------------------------------------------------------------------
# DatabaseSettings
# ---------------------------------------------------------------------------


class TestDatabaseSettings:
    def test_loads_mongodb_uri(self, with_mongo):
        assert DatabaseSettings().mongodb_uri == "mongodb://localhost:27017/"

    def test_default_db_name(self, with_mongo):
        with_mongo.delenv("DB_NAME", raising=False)
        assert DatabaseSettings().db_name == "matrimony"

    def test_missing_mongodb_uri_raises(self, monkeypatch):
        monkeypatch.delenv("MONGODB_URI", raising=False)
        with pytest.raises(PydanticValidationError):
            DatabaseSettings()


# ---------------------------------------------------------------------------
# RedisSettings
# ---------------------------------------------------------------------------


class TestRedisSettings:
    def test_redis_uri_optional(self, monkeypatch):
        monkeypatch.delenv("REDIS_URI", raising=False)
        assert RedisSettings().redis_uri is None

    def test_redis_uri_loaded(self, monkeypatch):
        monkeypatch.setenv("REDIS_URI", "redis://localhost:6379")
        assert RedisSettings().redis_uri == "redis://localhost:6379"


# ---------------------------------------------------------------------------
# JWTSettings
# ---------------------------------------------------------------------------


class TestJWTSettings:
    def test_defaults(self, monkeypatch):
        for var in (
            "JWT_ISSUER",
            "JWT_AUDIENCE",
            "ACCESS_TOKEN_TTL_SECONDS",
            "ADMIN_TOKEN_TTL_SECONDS",
            "RESET_TOKEN_TTL_SECONDS",
        ):
            monkeypatch.delenv(var, raising=False)
        s = JWTSettings()
        assert s.jwt_issuer == "kannadamatch"
        assert s.access_token_ttl_seconds == 7 * 24 * 3600
        assert s.admin_token_ttl_seconds == 3600
        assert s.reset_token_ttl_seconds == 900


@pytest.mark.parametrize(
    "reset_secret, expected",
    [
        (None, "session-secret"),  # falls back to JWT_SECRET
        ("reset-secret", "reset-secret"),
    ],
    ids=["session_fallback", "reset_secret_wins"],
)
def test_reset_secret_resolution(monkeypatch, reset_secret, expected):
    monkeypatch.setenv("JWT_SECRET", "session-secret")
    if reset_secret:
        monkeypatch.setenv("RESET_JWT_SECRET", reset_secret)
    else:
        monkeypatch.delenv("RESET_JWT_SECRET", raising=False)
    assert JWTSettings().reset_secret == expected


# ---------------------------------------------------------------------------
# Razorpay / scheduler
# ---------------------------------------------------------------------------


class TestRazorpaySettings:
    def test_credentials_loaded(self, monkeypatch):
        monkeypatch.setenv("RAZORPAY_KEY_ID", "rzp_test_1")
        monkeypatch.setenv("RAZORPAY_SECRET", "shh")
        s = RazorpaySettings()
        assert (s.razorpay_key_id, s.razorpay_secret) == ("rzp_test_1", "shh")
        assert s.razorpay_currency == "INR"


class TestSchedulerSettings:
    def test_interval_override(self, monkeypatch):
        monkeypatch.setenv("SCHEDULER_INTERVAL_SECONDS", "5")
        monkeypatch.setenv("SCHEDULER_ENABLED", "false")
        s = SchedulerSettings()
        assert s.scheduler_interval_seconds == 5.0
        assert s.scheduler_enabled is False


# ---------------------------------------------------------------------------
# AppSettings
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "env, expected",
    [("production", True), ("development", False)],
    ids=["production", "development"],
)
def test_is_production(with_mongo, env, expected):
    with_mongo.setenv("ENV", env)
    assert AppSettings().is_production is expected


class TestAppSettings:
    def test_sub_configs_populated(self, with_mongo):
        s = AppSettings()
        for attr in (
            "db",
            "redis",
            "jwt",
            "razorpay",
            "email",
            "logging",
            "sentry",
            "scheduler",
        ):
            assert getattr(s, attr) is not None, f"sub-config '{attr}' is None"

    def test_cors_origins_default(self, with_mongo):
        assert AppSettings().cors_origins == ["*"]

    def test_forgot_password_limit_default(self, with_mongo):
        with_mongo.delenv("FORGOT_PASSWORD_RATE_LIMIT", raising=False)
        assert AppSettings().forgot_password_rate_limit == "6 per 15 minutes"
