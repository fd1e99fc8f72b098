"""Comment-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from denominator_stage.db.time import as_utc


class CommentCreate(BaseModel):
    """Schema for posting a comment or a reply."""

    content: str | None = None
    nickname: str | None = None
    parent_id: int | None = Field(None, description="Comment being replied to")
    client_id: str | None = Field(None, description="Anonymous client id if no header is sent")


class CommentResponse(BaseModel):
    """A comment as shown to readers; owner identities are never exposed."""

    id: int
    post_id: str
    parent_id: int | None
    display_name: str
    content: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)  # type: ignore[return-value]

    model_config = ConfigDict(from_attributes=True)


class CommentListResponse(BaseModel):
    comments: list[CommentResponse]
    count: int
