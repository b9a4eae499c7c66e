"""
Admin moderation routes. Every route needs an admin or moderator token.

PUT    /api/admin/users/{profile_id}/status — set profile_status ("flagged" blocks login)
PUT    /api/admin/users/{profile_id}        — edit name, phone, role or status
DELETE /api/admin/users/{profile_id}        — hard delete
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from dependencies import get_moderation_service, require_admin
from schemas.dto.requests.admin import AdminUpdateUserRequest, UpdateUserStatusRequest
from schemas.dto.responses.common import MessageResponse, error_responses
from services.moderation_service import ModerationService, account_summary

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
    responses=error_responses(400, 401, 403, 404),
)


@router.put("/users/{profile_id}/status")
async def set_user_status(
    profile_id: str,
    body: UpdateUserStatusRequest,
    moderation: ModerationService = Depends(get_moderation_service),
) -> dict[str, Any]:
    user = await moderation.set_status(profile_id, body.status)
    return {"profileId": user.profile_id, "status": user.profile_status}


@router.put("/users/{profile_id}")
async def update_user(
    profile_id: str,
    body: AdminUpdateUserRequest,
    moderation: ModerationService = Depends(get_moderation_service),
) -> dict[str, Any]:
    user = await moderation.update_user(profile_id, body)
    return {"message": "User updated successfully", "user": account_summary(user)}


@router.delete("/users/{profile_id}", response_model=MessageResponse)
async def delete_user(
    profile_id: str,
    moderation: ModerationService = Depends(get_moderation_service),
) -> MessageResponse:
    await moderation.delete_user(profile_id)
    return MessageResponse(message="User deleted successfully")
