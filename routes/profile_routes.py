"""
Profile routes.

POST /api/create-profile   — requires a verified registration code
GET  /api/profiles/{id}    — public profile
PUT  /api/update-profile   — partial update; previous version kept in profile-history
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from dependencies import get_account_service
from schemas.dto.requests.profile import CreateProfileRequest, UpdateProfileRequest
from schemas.dto.responses.auth import CreateProfileResponse
from schemas.dto.responses.common import error_responses
from services.account_service import AccountService

router = APIRouter(prefix="/api", tags=["profiles"], responses=error_responses(400, 404, 409))


@router.post("/create-profile", status_code=201, response_model=CreateProfileResponse)
async def create_profile(
    body: CreateProfileRequest,
    accounts: AccountService = Depends(get_account_service),
) -> CreateProfileResponse:
    user = await accounts.create_profile(body)
    return CreateProfileResponse(
        profile_id=user.profile_id,
        email=user.email,
        subscription=user.subscription.current,
    )


@router.get("/profiles/{profile_id}")
async def get_profile(
    profile_id: str,
    accounts: AccountService = Depends(get_account_service),
) -> dict[str, Any]:
    return await accounts.get_profile(profile_id)


@router.put("/update-profile")
async def update_profile(
    body: UpdateProfileRequest,
    accounts: AccountService = Depends(get_account_service),
) -> dict[str, Any]:
    user = await accounts.update_profile(body)
    return {
        "message": "Profile updated successfully",
        "profile": accounts.render_profile(user),
    }
