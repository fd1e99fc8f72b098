# src/denominator_stage/api/v1/endpoints/chat.py
"""Chat channel endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from denominator_stage.core.errors import ValidationError
from denominator_stage.schemas.chat import (
    ChatHistoryResponse,
    ChatMessageCreate,
    ChatMessageResponse,
    OnlineUsersResponse,
    PresenceResponse,
    PresenceUpdate,
    PresenceUpdateResponse,
)
from denominator_stage.services.chat import DEFAULT_CHANNEL, MAX_HISTORY_LIMIT, ChatService

from ..dependencies import IdentityDep, ModeratorDep, RateLimitersDep, SessionDep

router = APIRouter(prefix="/chat", tags=["chat"])


def get_chat_service(db: SessionDep, moderator: ModeratorDep) -> ChatService:
    return ChatService(db, moderator)


ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]


@router.post("/messages", response_model=ChatMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    body: ChatMessageCreate,
    service: ChatServiceDep,
    identity: IdentityDep,
    limiters: RateLimitersDep,
) -> ChatMessageResponse:
    """Send a message to a channel."""
    client_id = identity.with_client_id(body.client_id).client_id
    if not client_id:
        # Chat is attributed to the browser, even for signed-in users.
        raise ValidationError("client_id is required")
    limiters.check("chat", client_id)
    message = service.send(
        channel=body.channel,
        nickname=body.nickname,
        content=body.content,
        client_id=client_id,
        post_id=body.post_id,
    )
    return ChatMessageResponse.model_validate(message)


@router.get("/history", response_model=ChatHistoryResponse)
async def chat_history(
    service: ChatServiceDep,
    response: Response,
    channel: str = DEFAULT_CHANNEL,
    limit: Annotated[int, Query(ge=1)] = 50,
    before: datetime | None = None,
    after: datetime | None = None,
) -> ChatHistoryResponse:
    """Return a page of channel history.

    ``channel`` defaults to ``general`` and ``limit`` is capped at 100.
    """
    response.headers["Cache-Control"] = "no-store"
    history = service.history(
        channel,
        limit=min(limit, MAX_HISTORY_LIMIT),
        before=before,
        after=after,
    )
    return ChatHistoryResponse.model_validate(history)


@router.delete("/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    message_id: int,
    service: ChatServiceDep,
    identity: IdentityDep,
    client_id: str | None = None,
) -> Response:
    """Soft-delete a message sent by the caller, or any message for admins."""
    service.delete(message_id, identity.with_client_id(client_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/users", response_model=OnlineUsersResponse)
async def online_users(service: ChatServiceDep, response: Response) -> OnlineUsersResponse:
    """Return chat users seen within the presence window."""
    response.headers["Cache-Control"] = "no-store"
    users = service.online_users()
    return OnlineUsersResponse(users=[PresenceResponse.model_validate(user) for user in users])


@router.post("/users", response_model=PresenceUpdateResponse)
async def update_presence(body: PresenceUpdate, service: ChatServiceDep) -> PresenceUpdateResponse:
    """Record a presence heartbeat for a chat nickname."""
    presence = service.update_presence(body.username, body.status)
    return PresenceUpdateResponse(user=PresenceResponse.model_validate(presence))
