"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Services are built once in the app lifespan
and stored on app.state; these providers only hand them out.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import Depends, Request

from errors import AuthenticationError, ForbiddenError
from schemas.models.user import ROLE_ADMIN, ROLE_MODERATOR
from services.account_service import AccountService
from services.chat_service import ChatService
from services.event_service import EventService
from services.interest_service import InterestService
from services.moderation_service import ModerationService
from services.notification_service import NotificationService
from services.payment_service import PaymentService
from services.report_service import ReportService
from services.story_service import StoryService
from shared.ip_utils import get_client_ip


async def get_db(request: Request):
    """Return the async MongoDB database from app.state."""
    return request.app.state.db


async def get_redis(request: Request):
    """Return the async Redis client from app.state (may be None if not configured)."""
    return request.app.state.redis


# ── Services ─────────────────────────────────────────────────────────────────


def get_account_service(request: Request) -> AccountService:
    return request.app.state.account_service


def get_payment_service(request: Request) -> PaymentService:
    return request.app.state.payment_service


def get_interest_service(request: Request) -> InterestService:
    return request.app.state.interest_service


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def get_event_service(request: Request) -> EventService:
    return request.app.state.event_service


def get_report_service(request: Request) -> ReportService:
    return request.app.state.report_service


def get_notification_service(request: Request) -> NotificationService:
    return request.app.state.notification_service


def get_story_service(request: Request) -> StoryService:
    return request.app.state.story_service


def get_moderation_service(request: Request) -> ModerationService:
    return request.app.state.moderation_service


# ── Auth ─────────────────────────────────────────────────────────────────────


def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        token = auth_header.split(" ", 1)[1].strip()
        return token or None
    return None


def get_current_claims(
    request: Request,
    accounts: AccountService = Depends(get_account_service),
) -> dict[str, Any]:
    """Decoded session token; 401 when missing or invalid."""
    token = _bearer_token(request)
    if token is None:
        raise AuthenticationError("Authentication required")
    return accounts.verify_access_token(token)


def require_admin(claims: dict[str, Any] = Depends(get_current_claims)) -> dict[str, Any]:
    if claims.get("role") not in (ROLE_ADMIN, ROLE_MODERATOR):
        raise ForbiddenError("Admin access required")
    return claims


# ── Rate limiting ────────────────────────────────────────────────────────────


async def forgot_password_rate_limit(request: Request) -> None:
    """Per-IP fixed window on POST /api/auth/forgot-password."""
    await request.app.state.forgot_password_limiter.hit(get_client_ip(request))
