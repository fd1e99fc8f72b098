"""Models describing chat and discussion messages."""
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from denominator_stage.db.session import Base
from denominator_stage.db.time import utcnow


class ChatMessage(Base):
    """Message posted to a named channel such as ``lobby`` or ``post:<id>``."""

    __tablename__ = "chat_messages"
    __table_args__ = (Index("ix_chat_messages_channel_created_at", "channel", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    channel: Mapped[str] = mapped_column(Text, nullable=False)
    nickname: Mapped[str] = mapped_column(String(64), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    client_id: Mapped[str] = mapped_column(Text, nullable=False)
    post_id: Mapped[str | None] = mapped_column(
        String(100),
        ForeignKey("posts.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class ChatPresence(Base):
    """Last time a chat nickname was seen, one row per nickname."""

    __tablename__ = "chat_presence"
    __table_args__ = (Index("ix_chat_presence_last_seen", "last_seen"),)

    username: Mapped[str] = mapped_column(String(64), primary_key=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="online")
    last_seen: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
