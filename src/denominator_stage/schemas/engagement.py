"""Schemas for likes and shares."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ActorRequest(BaseModel):
    """Body carrying an optional anonymous client id."""

    client_id: str | None = None


class LikeResponse(BaseModel):
    liked: bool
    likes_count: int

    model_config = ConfigDict(from_attributes=True)


class ShareCreate(ActorRequest):
    channel: str | None = Field(None, description="copy, x, linkedin, facebook, email, native or other")


class ShareResponse(BaseModel):
    channel: str
    shares_count: int

    model_config = ConfigDict(from_attributes=True)
