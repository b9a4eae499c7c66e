"""Integration tests for GET /health."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from errors import register_error_handlers
from routes.health_routes import router as health_router


def _build_test_app(mongo_ok: bool = True, redis_state: str = "ok") -> FastAPI:
    """Minimal app with a mocked database and an optional mocked Redis.

    redis_state is one of "ok", "down" or "absent".
    """
    mock_db = MagicMock()
    mock_db.client.admin.command = AsyncMock(
        return_value={"ok": 1} if mongo_ok else None,
        side_effect=None if mongo_ok else Exception("connection refused"),
    )

    mock_redis = None
    if redis_state != "absent":
        mock_redis = MagicMock()
        mock_redis.ping = AsyncMock(
            return_value=True,
            side_effect=None if redis_state == "ok" else Exception("redis down"),
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.db = mock_db
        app.state.redis = mock_redis
        yield

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(health_router)
    return app


def _get_health(app: FastAPI):
    with TestClient(app) as client:
        return client.get("/health")


@pytest.mark.parametrize(
    "mongo_ok, redis_state, status_code, overall, redis_check",
    [
        (True, "ok", 200, "healthy", "ok"),
        (True, "down", 200, "degraded", "error"),
        (True, "absent", 200, "degraded", "not_configured"),
        (False, "ok", 503, "unhealthy", "ok"),
        (False, "absent", 503, "unhealthy", "not_configured"),
    ],
    ids=[
        "all_ok",
        "redis_down",
        "rate_limits_in_memory",
        "mongo_down",
        "mongo_down_no_redis",
    ],
)
def test_health_status(mongo_ok, redis_state, status_code, overall, redis_check):
    resp = _get_health(_build_test_app(mongo_ok, redis_state))

    assert resp.status_code == status_code
    body = resp.json()
    assert body["status"] == overall
    assert body["checks"]["mongodb"] == ("ok" if mongo_ok else "error")
    assert body["checks"]["redis"] == redis_check


def test_ping_is_sent_to_admin_database():
    app = _build_test_app()
    _get_health(app)
    app.state.db.client.admin.command.assert_awaited_once_with("ping")
