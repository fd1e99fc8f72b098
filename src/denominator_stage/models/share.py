# src/denominator_stage/models/share.py
"""Append-only share event log."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from denominator_stage.db.session import Base
from denominator_stage.db.time import utcnow

SHARE_CHANNELS = ("copy", "x", "linkedin", "facebook", "email", "native", "other")


class PostShareEvent(Base):
    """A single share of a post through one channel. Never deduplicated."""

    __tablename__ = "post_share_events"
    __table_args__ = (
        CheckConstraint(
            "channel IN ('copy', 'x', 'linkedin', 'facebook', 'email', 'native', 'other')",
            name="ck_post_share_events_channel",
        ),
        Index("ix_post_share_events_post_id", "post_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    channel: Mapped[str] = mapped_column(String(16), nullable=False)
    actor_kind: Mapped[str] = mapped_column(String(8), nullable=False)
    actor_id: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
