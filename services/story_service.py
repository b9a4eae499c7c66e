"""StoryService — couples' success stories."""

from __future__ import annotations

from errors import ValidationError
from repositories.story_repository import StoryRepository
from schemas.dto.requests.story import CreateStoryRequest
from schemas.models.story import StoryDoc
from shared.datetime_utils import utc_now
from shared.logging import get_logger
from shared.validators import normalize_email, validate_email

log = get_logger(__name__)


class StoryService:
    def __init__(self, story_repo: StoryRepository) -> None:
        self._stories = story_repo

    async def create(self, req: CreateStoryRequest) -> StoryDoc:
        if not validate_email(req.email):
            raise ValidationError("Invalid email", field="email")
        story = await self._stories.insert(
            StoryDoc(
                names=req.names,
                wedding_date=req.wedding_date,
                location=req.location,
                email=normalize_email(req.email),
                story=req.story,
                image=req.image_url,
                created_at=utc_now(),
            )
        )
        log.info("story_created", story_id=str(story.id))
        return story

    async def list_stories(self) -> list[StoryDoc]:
        return await self._stories.list_recent()
