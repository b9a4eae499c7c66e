"""
Notification routes. A session token is required; users only see their own
notifications, admins may read anyone's.

GET /api/notifications/{profile_id}
PUT /api/notifications/{notification_id}/read
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from dependencies import get_current_claims, get_notification_service
from errors import ForbiddenError
from schemas.dto.responses.common import error_responses
from schemas.models.user import ROLE_ADMIN, ROLE_MODERATOR
from services.notification_service import NotificationService

router = APIRouter(
    prefix="/api/notifications",
    tags=["notifications"],
    responses=error_responses(400, 401, 403, 404),
)


@router.get("/{profile_id}")
async def list_notifications(
    profile_id: str,
    claims: dict[str, Any] = Depends(get_current_claims),
    notifications: NotificationService = Depends(get_notification_service),
) -> list[dict[str, Any]]:
    if claims.get("profile_id") != profile_id and claims.get("role") not in (
        ROLE_ADMIN,
        ROLE_MODERATOR,
    ):
        raise ForbiddenError("Cannot read another user's notifications")
    return await notifications.list_for(profile_id)


@router.put("/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    claims: dict[str, Any] = Depends(get_current_claims),
    notifications: NotificationService = Depends(get_notification_service),
) -> dict[str, Any]:
    return await notifications.mark_read(notification_id, claims.get("profile_id", ""))
