"""Chat message schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from denominator_stage.db.time import as_utc


class ChatMessageCreate(BaseModel):
    """Schema for sending a chat message."""

    channel: str | None = None
    nickname: str | None = None
    content: str | None = None
    client_id: str | None = None
    post_id: str | None = None


class ChatMessageResponse(BaseModel):
    """A chat message as shown to channel readers."""

    id: int
    channel: str
    nickname: str
    content: str
    post_id: str | None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)  # type: ignore[return-value]

    model_config = ConfigDict(from_attributes=True)


class ChatHistoryResponse(BaseModel):
    """A page of chat history in chronological order."""

    channel: str
    messages: list[ChatMessageResponse]
    count: int = Field(..., description="Non-deleted messages in the channel")
    has_more: bool

    model_config = ConfigDict(from_attributes=True)


class PresenceUpdate(BaseModel):
    """Heartbeat from a chat participant."""

    username: str | None = None
    status: str | None = None


class PresenceResponse(BaseModel):
    """A chat participant and when they were last seen."""

    username: str
    status: str
    last_seen: datetime

    @field_validator("last_seen")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)  # type: ignore[return-value]

    model_config = ConfigDict(from_attributes=True)


class PresenceUpdateResponse(BaseModel):
    user: PresenceResponse


class OnlineUsersResponse(BaseModel):
    """Users seen within the presence window, ordered by name."""

    users: list[PresenceResponse]
