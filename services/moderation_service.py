"""
ModerationService — admin actions on user accounts.

Setting profile_status to "flagged" locks the user out at login. Deleting a
user is the only hard delete in the system; the user is also dropped from
every event roster and the interest record they own is removed. Messages
and reports that mention them are kept.
"""

from __future__ import annotations

from typing import Any

from errors import NotFoundError
from repositories.event_repository import EventRepository
from repositories.interest_repository import InterestRepository
from repositories.user_repository import UserRepository
from schemas.dto.requests.admin import AdminUpdateUserRequest
from schemas.models.user import UserDoc
from shared.logging import get_logger

log = get_logger(__name__)


def account_summary(user: UserDoc) -> dict[str, Any]:
    return {
        "profileId": user.profile_id,
        "name": user.personal_info.name,
        "email": user.email,
        "phone": user.personal_info.mobile,
        "role": user.role,
        "status": user.profile_status,
        "subscription": user.subscription.current,
    }


class ModerationService:
    def __init__(
        self,
        user_repo: UserRepository,
        event_repo: EventRepository,
        interest_repo: InterestRepository,
    ) -> None:
        self._users = user_repo
        self._events = event_repo
        self._interests = interest_repo

    async def set_status(self, profile_id: str, status: str) -> UserDoc:
        user = await self._users.update_by_profile_id(profile_id, {"profile_status": status})
        if user is None:
            raise NotFoundError("User not found")
        log.info("profile_status_changed", profile_id=profile_id, status=status)
        return user

    async def update_user(self, profile_id: str, req: AdminUpdateUserRequest) -> UserDoc:
        fields: dict[str, Any] = {}
        if req.name is not None:
            fields["personal_info.name"] = req.name
        if req.phone is not None:
            fields["personal_info.mobile"] = req.phone
        if req.role is not None:
            fields["role"] = req.role
        if req.status is not None:
            fields["profile_status"] = req.status

        user = await self._users.update_by_profile_id(profile_id, fields)
        if user is None:
            raise NotFoundError("User not found")
        log.info("account_updated_by_admin", profile_id=profile_id, fields=sorted(fields))
        return user

    async def delete_user(self, profile_id: str) -> None:
        user = await self._users.delete_by_profile_id(profile_id)
        if user is None:
            raise NotFoundError("User not found")
        for event_id in user.registered_events:
            await self._events.remove_attendee(event_id, user.id)
        await self._interests.delete_record(profile_id)
        log.info(
            "user_deleted",
            profile_id=profile_id,
            events_left=len(user.registered_events),
        )
