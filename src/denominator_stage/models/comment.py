# src/denominator_stage/models/comment.py
"""Models for threaded post comments."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from denominator_stage.db.session import Base
from denominator_stage.db.time import utcnow
from denominator_stage.services.identity import Actor, AnonymousActor, AuthenticatedActor


class PostComment(Base):
    """Reader comment on a post; replies nest one level deep."""

    __tablename__ = "post_comments"
    __table_args__ = (
        # Exactly one identity owns the comment.
        CheckConstraint(
            "(user_id IS NULL) <> (client_id IS NULL)",
            name="ck_post_comments_single_author",
        ),
        Index("ix_post_comments_post_id_created_at", "post_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Always a top-level comment when set.
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("post_comments.id"),
        nullable=True,
    )
    nickname: Mapped[str | None] = mapped_column(String(64), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    client_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    @property
    def author(self) -> Actor:
        """Return the identity that owns this comment."""
        if self.user_id is not None:
            return AuthenticatedActor(self.user_id)
        return AnonymousActor(self.client_id or "")

    @author.setter
    def author(self, actor: Actor) -> None:
        if isinstance(actor, AuthenticatedActor):
            self.user_id, self.client_id = actor.user_id, None
        else:
            self.user_id, self.client_id = None, actor.client_id

    @property
    def display_name(self) -> str:
        """Return the nickname shown to readers."""
        return self.nickname or "Anonymous"
