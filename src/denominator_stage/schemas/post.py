"""Post-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from denominator_stage.db.time import as_utc, utcnow
from denominator_stage.services.posts import parse_tags, publication_state

PostStatus = Literal["draft", "published"]


class _PublishAtMixin(BaseModel):
    publish_at: datetime | None = Field(
        None,
        description="When the post becomes visible; naive values are read as UTC",
    )

    @field_validator("publish_at")
    @classmethod
    def _normalize_publish_at(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class PostCreate(_PublishAtMixin):
    """Schema for creating a new post.

    Required text fields are checked by the lifecycle service so that a blank
    title is reported as a validation error rather than a schema error.
    """

    id: str | None = Field(None, max_length=100, description="Explicit slug override")
    title: str | None = None
    excerpt: str | None = None
    content: str | None = Field(None, description="Markdown content")
    tags: list[str] | str | None = None
    author_name: str | None = Field(None, max_length=128)
    cover_image_url: str | None = None
    status: PostStatus | None = None


class PostUpdate(_PublishAtMixin):
    """Partial update; only fields present in the request body change."""

    title: str | None = None
    excerpt: str | None = None
    content: str | None = None
    tags: list[str] | str | None = None
    author_name: str | None = Field(None, max_length=128)
    cover_image_url: str | None = None
    status: PostStatus | None = None


class PublishRequest(_PublishAtMixin):
    """Schema for publishing a post now or at a scheduled time."""


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: str
    title: str
    excerpt: str
    content: str
    tags: list[str]
    read_time: int
    author_name: str
    cover_image_url: str | None
    status: PostStatus
    publication_state: str
    publish_at: datetime | None
    published_at: datetime | None
    publish_date: datetime | None
    created_at: datetime
    updated_at: datetime
    comments_count: int
    likes_count: int
    shares_count: int

    @model_validator(mode="before")
    @classmethod
    def _from_orm_row(cls, data: object) -> object:
        if not isinstance(data, dict):
            extracted: dict[str, object | None] = {}
            for field_name in cls.model_fields:
                extracted[field_name] = getattr(data, field_name, None)
            extracted["publication_state"] = publication_state(data, utcnow()).value  # type: ignore[arg-type]
            data = extracted

        if isinstance(data.get("tags"), str):
            data["tags"] = parse_tags(data["tags"])

        for field_name in ("publish_at", "published_at", "publish_date", "created_at", "updated_at"):
            value = data.get(field_name)
            if isinstance(value, datetime):
                data[field_name] = as_utc(value)

        return data

    model_config = ConfigDict(from_attributes=True)


class PublishedPostRef(BaseModel):
    """Identifier and title of a post touched by the publish sweep."""

    id: str
    title: str

    model_config = ConfigDict(from_attributes=True)


class PublishDueResponse(BaseModel):
    """Result of a publish sweep."""

    message: str
    published: list[PublishedPostRef]
