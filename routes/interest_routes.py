"""
Interest graph routes.

Listings return summaries of email-verified profiles only.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from dependencies import get_interest_service
from schemas.dto.requests.interest import (
    PassProfileRequest,
    RemoveAllInterestsRequest,
    SendInterestRequest,
)
from schemas.dto.responses.common import MessageResponse, error_responses
from services.interest_service import InterestService

router = APIRouter(prefix="/api", tags=["interests"], responses=error_responses(400, 404))


@router.post("/send-interest", response_model=MessageResponse)
async def send_interest(
    body: SendInterestRequest,
    interests: InterestService = Depends(get_interest_service),
) -> MessageResponse:
    await interests.express_interest(body.user_profile_id, body.interested_profile_id)
    return MessageResponse(message="Interest sent successfully")


@router.delete("/remove-interest", response_model=MessageResponse)
async def remove_interest(
    body: SendInterestRequest,
    interests: InterestService = Depends(get_interest_service),
) -> MessageResponse:
    await interests.withdraw_interest(body.user_profile_id, body.interested_profile_id)
    return MessageResponse(message="Interest removed successfully")


@router.delete("/remove-all-interests")
async def remove_all_interests(
    body: RemoveAllInterestsRequest,
    interests: InterestService = Depends(get_interest_service),
) -> dict[str, Any]:
    modified = await interests.remove_all_interests(body.user_profile_id)
    return {"message": "All interests removed successfully", "modifiedCount": modified}


@router.get("/interested-profiles")
async def interested_profiles(
    user_profile_id: str = Query(alias="userProfileId", min_length=1),
    interests: InterestService = Depends(get_interest_service),
) -> list[dict[str, Any]]:
    return await interests.list_interested(user_profile_id)


@router.get("/received-interests")
async def received_interests(
    user_profile_id: str = Query(alias="userProfileId", min_length=1),
    interests: InterestService = Depends(get_interest_service),
) -> list[dict[str, Any]]:
    return await interests.list_received(user_profile_id)


@router.post("/pass-profile", response_model=MessageResponse)
async def pass_profile(
    body: PassProfileRequest,
    interests: InterestService = Depends(get_interest_service),
) -> MessageResponse:
    await interests.pass_profile(body.user_profile_id, body.passed_profile_id)
    return MessageResponse(message="Profile passed successfully")


@router.get("/passed-profiles")
async def passed_profiles(
    user_profile_id: str = Query(alias="userProfileId", min_length=1),
    interests: InterestService = Depends(get_interest_service),
) -> list[dict[str, Any]]:
    return await interests.list_passed(user_profile_id)


@router.get("/recent-matches")
async def recent_matches(
    profile_id: str = Query(alias="profileId", min_length=1),
    gender: str = Query(min_length=1),
    interests: InterestService = Depends(get_interest_service),
) -> dict[str, Any]:
    return {"matches": await interests.recent_matches(profile_id, gender)}
