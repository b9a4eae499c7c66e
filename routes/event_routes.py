"""
Event routes. Reads are public; create, update and delete need an admin token.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from dependencies import get_event_service, require_admin
from schemas.dto.requests.event import EventRequest, RegisterEventRequest
from schemas.dto.responses.common import MessageResponse, error_responses
from services.event_service import EventService, serialize_event

router = APIRouter(
    prefix="/api/events", tags=["events"], responses=error_responses(400, 401, 403, 404)
)


@router.get("")
async def list_events(
    status: Optional[str] = None,
    type: Optional[str] = None,
    events: EventService = Depends(get_event_service),
) -> list[dict[str, Any]]:
    return [serialize_event(e) for e in await events.list_events(status, type)]


@router.post("", status_code=201, dependencies=[Depends(require_admin)])
async def create_event(
    body: EventRequest,
    events: EventService = Depends(get_event_service),
) -> dict[str, Any]:
    return serialize_event(await events.create(body))


@router.get("/{event_id}")
async def get_event(
    event_id: str,
    user_id: Optional[str] = Query(default=None, alias="userId"),
    events: EventService = Depends(get_event_service),
) -> dict[str, Any]:
    return await events.get(event_id, user_id)


@router.put("/{event_id}", dependencies=[Depends(require_admin)])
async def update_event(
    event_id: str,
    body: EventRequest,
    events: EventService = Depends(get_event_service),
) -> dict[str, Any]:
    return serialize_event(await events.update(event_id, body))


@router.delete(
    "/{event_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
async def delete_event(
    event_id: str,
    events: EventService = Depends(get_event_service),
) -> MessageResponse:
    await events.delete(event_id)
    return MessageResponse(message="Event deleted successfully")


@router.post("/{event_id}/register")
async def toggle_registration(
    event_id: str,
    body: RegisterEventRequest,
    events: EventService = Depends(get_event_service),
) -> dict[str, Any]:
    return await events.toggle_registration(event_id, body.user_id)
