"""
Success story routes.

POST /api/stories — image given as an http(s) URL
GET  /api/stories — newest first
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from dependencies import get_story_service
from schemas.dto.requests.story import CreateStoryRequest
from schemas.dto.responses.common import error_responses
from services.story_service import StoryService

router = APIRouter(prefix="/api/stories", tags=["stories"], responses=error_responses(400))


@router.post("", status_code=201)
async def create_story(
    body: CreateStoryRequest,
    stories: StoryService = Depends(get_story_service),
) -> dict[str, Any]:
    story = await stories.create(body)
    return {"message": "Story saved successfully", "story": story.to_wire()}


@router.get("")
async def list_stories(
    stories: StoryService = Depends(get_story_service),
) -> list[dict[str, Any]]:
    return [s.to_wire() for s in await stories.list_stories()]
