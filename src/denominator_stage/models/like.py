# src/denominator_stage/models/like.py
"""Models capturing likes on posts."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from denominator_stage.db.session import Base
from denominator_stage.db.time import utcnow


class PostLike(Base):
    """One actor's like on a post.

    The composite primary key prevents duplicate likes from the same actor,
    which is what keeps concurrent toggles from double counting.
    """

    __tablename__ = "post_likes"
    __table_args__ = (Index("ix_post_likes_post_id", "post_id"),)

    post_id: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # "user" or "client".
    actor_kind: Mapped[str] = mapped_column(String(8), primary_key=True)
    actor_id: Mapped[str] = mapped_column(Text, primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
