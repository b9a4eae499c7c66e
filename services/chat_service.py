"""
Real-time messaging relay and chat history.

MessagingRelay owns the presence map (profile id -> live session). It is
created once per app and stored on app.state; the WebSocket route feeds it
connect/disconnect and the three inbound events. Every message is stored
before it is relayed, so an offline receiver finds it in the history.

Frames on the wire are JSON objects {"event": <name>, "data": <payload>}.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional, Protocol

from bson import ObjectId

from errors import NotFoundError, ValidationError
from repositories.message_repository import MessageRepository
from repositories.user_repository import UserRepository
from schemas.models.message import MessageDoc
from services.profile_views import contact_summary
from shared.datetime_utils import utc_now
from shared.logging import get_logger, should_sample

log = get_logger(__name__)

EVENT_ONLINE_USERS = "onlineUsers"
EVENT_RECEIVE_MESSAGE = "receiveMessage"
EVENT_MESSAGE_EDITED = "messageEdited"
EVENT_MESSAGE_DELETED = "messageDeleted"


class ClientSession(Protocol):
    async def send_json(self, data: Any) -> None: ...


class MessagingRelay:
    def __init__(
        self, message_repo: MessageRepository, user_repo: UserRepository
    ) -> None:
        self._messages = message_repo
        self._users = user_repo
        self._sessions: dict[str, ClientSession] = {}
        self._lock = asyncio.Lock()

    # ── Presence ─────────────────────────────────────────────────────────────

    async def online_users(self) -> list[str]:
        async with self._lock:
            return list(self._sessions)

    async def is_online(self, profile_id: str) -> bool:
        async with self._lock:
            return profile_id in self._sessions

    async def connect(self, profile_id: str, session: ClientSession) -> None:
        async with self._lock:
            # Latest connection wins
            self._sessions[profile_id] = session
        if should_sample("presence_change"):
            log.info("presence_connected", profile_id=profile_id)
        await self.broadcast_online_users()

    async def disconnect(self, profile_id: str, session: ClientSession) -> None:
        async with self._lock:
            if self._sessions.get(profile_id) is not session:
                return
            del self._sessions[profile_id]
        if should_sample("presence_change"):
            log.info("presence_disconnected", profile_id=profile_id)
        await self.broadcast_online_users()

    async def broadcast_online_users(self) -> None:
        async with self._lock:
            sessions = list(self._sessions.values())
            online = list(self._sessions)
        for session in sessions:
            await self._emit(session, EVENT_ONLINE_USERS, online)

    async def _emit(self, session: Optional[ClientSession], event: str, data: Any) -> None:
        if session is None:
            return
        try:
            await session.send_json({"event": event, "data": data})
        except Exception as e:
            # Delivery is best effort; the message is already persisted
            log.warning(
                "relay_emit_failed",
                relay_event=event,
                error=str(e),
                error_type=type(e).__name__,
            )

    async def _session_for(self, profile_id: str) -> Optional[ClientSession]:
        async with self._lock:
            return self._sessions.get(profile_id)

    # ── Message events ───────────────────────────────────────────────────────

    async def send(self, payload: dict[str, Any]) -> MessageDoc:
        sender_id = payload.get("senderId")
        receiver_id = payload.get("receiverId")
        text = payload.get("text")
        if not sender_id or not receiver_id or not isinstance(text, str) or not text:
            raise ValidationError("senderId, receiverId and text are required")
        sent_time = payload.get("time")
        if isinstance(sent_time, bool) or not isinstance(
            sent_time, (str, int, float, type(None))
        ):
            raise ValidationError("time must be a string or epoch milliseconds")

        message = await self._messages.insert(
            MessageDoc(
                sender_id=sender_id,
                receiver_id=receiver_id,
                text=text,
                time=sent_time,
                created_at=utc_now(),
            )
        )
        await self._users.add_chat_contact(sender_id, receiver_id)
        await self._users.add_chat_contact(receiver_id, sender_id)
        log.info(
            "message_persisted",
            message_id=str(message.id),
            sender_id=sender_id,
            receiver_id=receiver_id,
        )

        wire = message.to_wire()
        await self._emit(await self._session_for(receiver_id), EVENT_RECEIVE_MESSAGE, wire)
        if sender_id != receiver_id:
            await self._emit(await self._session_for(sender_id), EVENT_RECEIVE_MESSAGE, wire)
        return message

    async def edit(self, message_id: str, new_text: str) -> Optional[MessageDoc]:
        if not ObjectId.is_valid(message_id or ""):
            return None
        message = await self._messages.update_text(ObjectId(message_id), new_text)
        if message is None:
            return None
        wire = message.to_wire()
        for party in {message.sender_id, message.receiver_id}:
            await self._emit(await self._session_for(party), EVENT_MESSAGE_EDITED, wire)
        log.info("message_edited", message_id=message_id)
        return message

    async def delete(self, message_id: str) -> Optional[MessageDoc]:
        if not ObjectId.is_valid(message_id or ""):
            return None
        message = await self._messages.delete(ObjectId(message_id))
        if message is None:
            return None
        for party in {message.sender_id, message.receiver_id}:
            await self._emit(
                await self._session_for(party), EVENT_MESSAGE_DELETED, message_id
            )
        log.info("message_deleted", message_id=message_id)
        return message

    async def dispatch(self, frame: Any) -> None:
        """Route one inbound frame. Unknown events are ignored."""
        if not isinstance(frame, dict):
            raise ValidationError("Frame must be a JSON object")
        event = frame.get("event")
        data = frame.get("data")
        if event == "sendMessage":
            await self.send(data if isinstance(data, dict) else {})
        elif event == "editMessage":
            data = data if isinstance(data, dict) else {}
            await self.edit(str(data.get("messageId") or ""), str(data.get("newText") or ""))
        elif event == "deleteMessage":
            message_id = data.get("messageId") if isinstance(data, dict) else data
            await self.delete(str(message_id or ""))
        else:
            log.debug("relay_unknown_event", relay_event=event)


class ChatService:
    """HTTP-side chat queries: history and contacts."""

    def __init__(
        self,
        message_repo: MessageRepository,
        user_repo: UserRepository,
        relay: MessagingRelay,
        base_url: str,
    ) -> None:
        self._messages = message_repo
        self._users = user_repo
        self._relay = relay
        self._base_url = base_url

    async def history(self, profile_id: str) -> list[dict[str, Any]]:
        return [m.to_wire() for m in await self._messages.history_for(profile_id)]

    async def add_contact(self, profile_id: str, contact_id: str) -> None:
        if not await self._users.add_chat_contact(profile_id, contact_id):
            raise NotFoundError("User not found")

    async def contacts(self, profile_id: str) -> list[dict[str, Any]]:
        user = await self._users.find_by_profile_id(profile_id)
        if user is None:
            raise NotFoundError("User not found")
        online = set(await self._relay.online_users())
        peers = await self._users.find_by_profile_ids(user.chat_contacts)
        return [
            contact_summary(peer, self._base_url, online=peer.profile_id in online)
            for peer in peers
        ]
