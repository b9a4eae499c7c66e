"""
Chat routes: the real-time channel plus history and contacts.

WS   /ws?userId=<profile_id>  — frames {"event": ..., "data": ...}
GET  /api/messages?userId=     — full history, oldest first
POST /api/add-chat-contact
GET  /api/chat-contacts?profileId=
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect

from dependencies import get_chat_service
from errors import AppError
from schemas.dto.requests.chat import AddChatContactRequest
from schemas.dto.responses.common import MessageResponse, error_responses
from services.chat_service import ChatService, MessagingRelay
from shared.logging import get_logger, log_with_context

log = get_logger(__name__)

router = APIRouter(tags=["chat"], responses=error_responses(400, 404))


@router.websocket("/ws")
async def chat_socket(websocket: WebSocket, user_id: str = Query(default="", alias="userId")):
    relay: MessagingRelay = websocket.app.state.relay
    await websocket.accept()
    if not user_id:
        await websocket.close(code=1008, reason="userId is required")
        return

    conn_log = log_with_context(log, profile_id=user_id)
    await relay.connect(user_id, websocket)
    try:
        while True:
            try:
                frame = await websocket.receive_json()
            except (KeyError, ValueError):
                # Binary frames have no "text" key
                conn_log.warning("ws_frame_not_json")
                continue
            try:
                await relay.dispatch(frame)
            except AppError as e:
                conn_log.warning("ws_event_rejected", error=e.message)
            except Exception as e:
                conn_log.error(
                    "ws_event_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )
    except WebSocketDisconnect:
        pass
    finally:
        await relay.disconnect(user_id, websocket)


@router.get("/api/messages")
async def message_history(
    user_id: str = Query(alias="userId", min_length=1),
    chat: ChatService = Depends(get_chat_service),
) -> dict[str, Any]:
    return {"messages": await chat.history(user_id)}


@router.post("/api/add-chat-contact", response_model=MessageResponse)
async def add_chat_contact(
    body: AddChatContactRequest,
    chat: ChatService = Depends(get_chat_service),
) -> MessageResponse:
    await chat.add_contact(body.profile_id, body.contact_id)
    return MessageResponse(message="Chat contact added")


@router.get("/api/chat-contacts")
async def chat_contacts(
    profile_id: str = Query(alias="profileId", min_length=1),
    chat: ChatService = Depends(get_chat_service),
) -> dict[str, Any]:
    return {"contacts": await chat.contacts(profile_id)}
