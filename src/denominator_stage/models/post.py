# src/denominator_stage/models/post.py
"""SQLAlchemy model for blog posts and their publication fields."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from denominator_stage.db.session import Base
from denominator_stage.db.time import utcnow

POST_STATUS_DRAFT = "draft"
POST_STATUS_PUBLISHED = "published"


class Post(Base):
    """Long-form article written by the site administrator.

    Scheduling is encoded as ``status = published`` with a future
    ``publish_at``; ``published_at`` records when visibility first took effect.
    """

    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint("status IN ('draft', 'published')", name="ck_posts_status"),
        Index("ix_posts_status_publish_at", "status", "publish_at"),
    )

    # Slug derived from the title.
    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    excerpt: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    # Canonical JSON array of unique tags.
    tags: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    read_time: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    author_name: Mapped[str] = mapped_column(Text, nullable=False, default="Anonymous")
    cover_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default=POST_STATUS_DRAFT)
    publish_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # Legacy sort key, mirrors published_at.
    publish_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    comments_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    likes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    shares_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
