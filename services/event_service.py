"""
Event registry and the background status scheduler.

Status rule, evaluated against wall-clock UTC for every upcoming or ongoing
event (start = event day + "HH:MM"):

- start <= now < start + 4h              -> ongoing
- now >= start + 4h                      -> completed
- start earlier than today's midnight    -> completed

The scheduler loop also runs the subscription expiry sweep.

When a notifier is wired in, scheduling an event notifies every user and
each register/unregister notifies the admins.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Any, Optional

from bson import ObjectId

from errors import NotFoundError, ValidationError
from repositories.event_repository import EventRepository
from repositories.user_repository import UserRepository
from schemas.dto.requests.event import EventRequest
from schemas.models.event import EVENT_COMPLETED, EVENT_ONGOING, EventDoc
from services.notification_service import NotificationService
from services.subscription_service import SubscriptionService
from shared.datetime_utils import combine_date_time, start_of_day, utc_now
from shared.logging import get_logger, should_sample

log = get_logger(__name__)

EVENT_DURATION = timedelta(hours=4)


def next_event_status(event: EventDoc, now: datetime) -> Optional[str]:
    """The status *event* should move to at *now*, or None to leave it."""
    start = event.starts_at
    end = start + EVENT_DURATION
    if start <= now < end and event.status != EVENT_ONGOING:
        return EVENT_ONGOING
    if now >= end and event.status != EVENT_COMPLETED:
        return EVENT_COMPLETED
    if start < start_of_day(now) and event.status != EVENT_COMPLETED:
        return EVENT_COMPLETED
    return None


def _parse_event_id(event_id: str) -> ObjectId:
    if not ObjectId.is_valid(event_id):
        raise ValidationError(f"Invalid event ID: {event_id}", field="id")
    return ObjectId(event_id)


def serialize_event(event: EventDoc, is_registered: Optional[bool] = None) -> dict[str, Any]:
    data = {
        "id": str(event.id),
        "title": event.title,
        "description": event.description,
        "date": event.date.date().isoformat(),
        "time": event.time,
        "location": event.location,
        "type": event.type,
        "status": event.status,
        "maxAttendees": event.max_attendees,
        "currentAttendees": event.current_attendees,
        "isOnline": event.is_online,
        "price": event.price,
        "organizer": event.organizer,
        "image": event.image,
        "registeredUsers": [str(uid) for uid in event.registered_users],
    }
    if is_registered is not None:
        data["isRegistered"] = is_registered
    return data


class EventService:
    def __init__(
        self,
        event_repo: EventRepository,
        user_repo: UserRepository,
        notifier: Optional[NotificationService] = None,
    ) -> None:
        self._events = event_repo
        self._users = user_repo
        self._notifier = notifier

    def _fields_from_request(self, req: EventRequest, now: datetime) -> dict[str, Any]:
        starts_at = combine_date_time(req.date, req.time)
        if starts_at < now:
            raise ValidationError("Event date and time must be in the future", field="date")
        return {
            "title": req.title,
            "description": req.description,
            "date": starts_at.replace(hour=0, minute=0, second=0, microsecond=0),
            "time": req.time,
            "location": req.location,
            "type": req.type,
            "max_attendees": req.max_attendees,
            "is_online": req.is_online,
            "price": req.price,
            "organizer": req.organizer or "Admin",
            "image": req.image,
        }

    async def create(self, req: EventRequest, now: Optional[datetime] = None) -> EventDoc:
        now = now or utc_now()
        fields = self._fields_from_request(req, now)
        event = await self._events.insert(EventDoc(**fields, created_date=now))
        log.info("event_created", event_id=str(event.id), title=event.title)
        if self._notifier is not None:
            await self._notifier.notify_everyone(
                event.id,
                f"New event scheduled: {event.title} on {event.date.date().isoformat()}",
            )
        return event

    async def update(
        self, event_id: str, req: EventRequest, now: Optional[datetime] = None
    ) -> EventDoc:
        oid = _parse_event_id(event_id)
        fields = self._fields_from_request(req, now or utc_now())
        event = await self._events.find_by_id(oid)
        if event is None:
            raise NotFoundError("Event not found")
        if req.max_attendees < event.current_attendees:
            raise ValidationError(
                "maxAttendees cannot be below the current attendee count",
                field="maxAttendees",
            )
        updated = await self._events.update_fields(oid, fields)
        if updated is None:
            raise NotFoundError("Event not found")
        log.info("event_updated", event_id=event_id)
        return updated

    async def delete(self, event_id: str) -> None:
        oid = _parse_event_id(event_id)
        if not await self._events.delete(oid):
            raise NotFoundError("Event not found")
        if self._notifier is not None:
            await self._notifier.discard_for_event(oid)
        log.info("event_deleted", event_id=event_id)

    async def get(self, event_id: str, profile_id: Optional[str] = None) -> dict[str, Any]:
        event = await self._events.find_by_id(_parse_event_id(event_id))
        if event is None:
            raise NotFoundError("Event not found")
        is_registered = False
        if profile_id:
            user = await self._users.find_by_profile_id(profile_id)
            is_registered = user is not None and user.id in event.registered_users
        return serialize_event(event, is_registered)

    async def list_events(
        self, status: Optional[str] = None, event_type: Optional[str] = None
    ) -> list[EventDoc]:
        filters: dict[str, Any] = {}
        if status and status != "all":
            filters["status"] = status
        if event_type and event_type != "all":
            filters["type"] = event_type
        return await self._events.find_many(filters)

    async def toggle_registration(self, event_id: str, profile_id: str) -> dict[str, Any]:
        """Register *profile_id* for the event, or unregister if already in."""
        user = await self._users.find_by_profile_id(profile_id)
        if user is None:
            raise NotFoundError(f"User not found for profileId: {profile_id}")
        oid = _parse_event_id(event_id)
        event = await self._events.find_by_id(oid)
        if event is None:
            raise NotFoundError("Event not found")

        if user.id in event.registered_users:
            updated = await self._events.remove_attendee(oid, user.id)
            await self._users.remove_registered_event(user.id, oid)
            is_registered = False
        else:
            updated = await self._events.add_attendee(oid, user.id, event.max_attendees)
            if updated is None:
                current = await self._events.find_by_id(oid)
                if current is None or user.id not in current.registered_users:
                    raise ValidationError("Event is full")
                updated = current
            await self._users.add_registered_event(user.id, oid)
            is_registered = True

        # A concurrent unregister may have applied first; report the stored state
        if updated is None:
            updated = await self._events.find_by_id(oid)
            if updated is None:
                raise NotFoundError("Event not found")
        log.info(
            "event_registration_toggled",
            event_id=event_id,
            profile_id=profile_id,
            registered=is_registered,
        )
        if self._notifier is not None:
            action = "registered for" if is_registered else "unregistered from"
            await self._notifier.notify_admins(
                oid, f"User {user.personal_info.name} has {action} event: {event.title}"
            )
        return serialize_event(updated, is_registered)


class EventStatusScheduler:
    """Periodic job: event status transitions plus subscription expiry."""

    def __init__(
        self,
        event_repo: EventRepository,
        subscription_service: Optional[SubscriptionService] = None,
        interval_seconds: float = 60.0,
    ) -> None:
        self._events = event_repo
        self._subscriptions = subscription_service
        self._interval = interval_seconds

    async def update_event_statuses(self, now: Optional[datetime] = None) -> int:
        now = now or utc_now()
        changed = 0
        for event in await self._events.find_schedulable():
            try:
                status = next_event_status(event, now)
                if status is None:
                    continue
                if await self._events.set_status(event.id, status):
                    changed += 1
                    log.info(
                        "event_status_updated",
                        event_id=str(event.id),
                        title=event.title,
                        status=status,
                    )
            except Exception as e:
                log.error(
                    "event_status_update_failed",
                    event_id=str(event.id),
                    error=str(e),
                    error_type=type(e).__name__,
                )
        return changed

    async def tick(self, now: Optional[datetime] = None) -> None:
        now = now or utc_now()
        changed = await self.update_event_statuses(now)
        expired = 0
        if self._subscriptions is not None:
            expired = await self._subscriptions.expire_lapsed(now)
        if should_sample("scheduler_tick"):
            log.info("scheduler_tick", events_changed=changed, subscriptions_expired=expired)

    async def run_forever(self) -> None:
        log.info("scheduler_started", interval_seconds=self._interval)
        while True:
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log.error(
                    "scheduler_tick_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )
            await asyncio.sleep(self._interval)
