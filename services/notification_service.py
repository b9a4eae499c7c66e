"""
NotificationService — in-app notifications for event activity.

Fan-out writes are best effort: a failed insert is logged and never undoes
the event change that triggered it.
"""

from __future__ import annotations

from typing import Any, Optional

from bson import ObjectId

from errors import NotFoundError, ValidationError
from repositories.notification_repository import NotificationRepository
from repositories.user_repository import UserRepository
from schemas.models.notification import NotificationDoc
from schemas.models.user import ROLE_ADMIN
from shared.datetime_utils import utc_now
from shared.logging import get_logger

log = get_logger(__name__)


class NotificationService:
    def __init__(
        self, notification_repo: NotificationRepository, user_repo: UserRepository
    ) -> None:
        self._notifications = notification_repo
        self._users = user_repo

    async def _fan_out(
        self, recipients: list[ObjectId], event_id: Optional[ObjectId], message: str
    ) -> int:
        now = utc_now()
        docs = [
            NotificationDoc(user_id=uid, event_id=event_id, message=message, created_at=now)
            for uid in recipients
        ]
        try:
            return await self._notifications.insert_many(docs)
        except Exception as e:
            log.error(
                "notification_fan_out_failed",
                recipients=len(docs),
                error=str(e),
                error_type=type(e).__name__,
            )
            return 0

    async def notify_admins(self, event_id: Optional[ObjectId], message: str) -> int:
        return await self._fan_out(
            await self._users.find_ids(roles=(ROLE_ADMIN,)), event_id, message
        )

    async def notify_everyone(self, event_id: Optional[ObjectId], message: str) -> int:
        return await self._fan_out(await self._users.find_ids(), event_id, message)

    async def discard_for_event(self, event_id: ObjectId) -> int:
        return await self._notifications.delete_for_event(event_id)

    async def _user_id(self, profile_id: str) -> ObjectId:
        user = await self._users.find_by_profile_id(profile_id)
        if user is None:
            raise NotFoundError("User not found")
        return user.id

    async def list_for(self, profile_id: str) -> list[dict[str, Any]]:
        """Newest first."""
        user_id = await self._user_id(profile_id)
        return [n.to_wire() for n in await self._notifications.find_for_user(user_id)]

    async def mark_read(self, notification_id: str, profile_id: str) -> dict[str, Any]:
        if not ObjectId.is_valid(notification_id):
            raise ValidationError(f"Invalid notification ID: {notification_id}", field="id")
        user_id = await self._user_id(profile_id)
        notification = await self._notifications.mark_read(ObjectId(notification_id), user_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        return notification.to_wire()
