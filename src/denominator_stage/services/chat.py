"""Channel chat: moderated sends, cursor-paginated history, soft deletes and presence."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from denominator_stage.core.errors import ForbiddenError, NotFoundError, ValidationError, storage_errors
from denominator_stage.core.settings import settings
from denominator_stage.db.time import as_utc, utcnow
from denominator_stage.models.chat import ChatMessage, ChatPresence
from denominator_stage.models.post import Post
from denominator_stage.services.identity import RequestIdentity
from denominator_stage.services.moderation import ContentModerator, Moderator

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL = "general"
DEFAULT_HISTORY_LIMIT = 50
MAX_HISTORY_LIMIT = 100
DEFAULT_PRESENCE_STATUS = "online"
PRESENCE_STATUS_MAX_LENGTH = 16


@dataclass(frozen=True)
class ChatHistory:
    """A page of channel messages in chronological order."""

    channel: str
    messages: list[ChatMessage]
    count: int
    has_more: bool


class ChatService:
    def __init__(
        self,
        db: Session,
        moderator: Moderator | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.moderator = moderator or ContentModerator()
        self._clock = clock

    def send(
        self,
        *,
        channel: str | None,
        nickname: str | None,
        content: str | None,
        client_id: str,
        post_id: str | None = None,
    ) -> ChatMessage:
        """Store a message after nickname and moderation checks.

        Rate limiting happens before this is called, keyed by ``client_id``.
        """
        channel_name = (channel or "").strip()
        if not channel_name:
            raise ValidationError("Channel is required")

        name = (nickname or "").strip()
        low, high = settings.chat_nickname_min_length, settings.chat_nickname_max_length
        if not low <= len(name) <= high:
            raise ValidationError(f"Nickname must be {low}-{high} characters")

        body = content or ""
        verdict = self.moderator.moderate(body)
        if not verdict.approved:
            raise ValidationError(verdict.reason or "Message rejected")

        with storage_errors("send message", self.db):
            if post_id is not None and self.db.get(Post, post_id) is None:
                raise NotFoundError("Post not found")
            message = ChatMessage(
                channel=channel_name,
                nickname=name,
                content=body.strip(),
                client_id=client_id,
                post_id=post_id,
                created_at=self._clock(),
            )
            self.db.add(message)
            self.db.commit()
            self.db.refresh(message)
        return message

    def history(
        self,
        channel: str | None,
        *,
        limit: int | None = None,
        before: datetime | None = None,
        after: datetime | None = None,
    ) -> ChatHistory:
        """Return up to ``limit`` non-deleted messages, oldest first.

        Without cursors the most recent page is returned. ``before`` pages
        backwards and ``after`` fetches messages newer than a known one.
        """
        channel_name = (channel or "").strip()
        if not channel_name:
            raise ValidationError("Channel is required")
        page_size = min(max(1, limit or DEFAULT_HISTORY_LIMIT), MAX_HISTORY_LIMIT)

        visible = (ChatMessage.channel == channel_name) & ChatMessage.is_deleted.is_(False)
        stmt = select(ChatMessage).where(visible)
        if before is not None:
            stmt = stmt.where(ChatMessage.created_at < as_utc(before))
        if after is not None:
            stmt = stmt.where(ChatMessage.created_at > as_utc(after))

        with storage_errors("fetch chat history", self.db):
            if after is not None and before is None:
                rows = list(
                    self.db.scalars(
                        stmt.order_by(ChatMessage.created_at, ChatMessage.id).limit(page_size + 1)
                    )
                )
                has_more = len(rows) > page_size
                messages = rows[:page_size]
            else:
                rows = list(
                    self.db.scalars(
                        stmt.order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc()).limit(
                            page_size + 1
                        )
                    )
                )
                has_more = len(rows) > page_size
                messages = list(reversed(rows[:page_size]))
            count = self.db.scalar(select(func.count()).select_from(ChatMessage).where(visible))

        return ChatHistory(
            channel=channel_name,
            messages=messages,
            count=int(count or 0),
            has_more=has_more,
        )

    def delete(self, message_id: int, identity: RequestIdentity) -> None:
        """Soft-delete a message; only admins and the sending client may."""
        with storage_errors("fetch message", self.db):
            message = self.db.get(ChatMessage, message_id)
        if message is None or message.is_deleted:
            raise NotFoundError("Message not found")
        if not identity.is_admin and identity.client_id != message.client_id:
            raise ForbiddenError("You can only delete your own messages")
        with storage_errors("delete message", self.db):
            message.is_deleted = True
            self.db.commit()
        logger.info("Chat message %s in %s deleted", message_id, message.channel)

    # --- presence -----------------------------------------------------------------
    def update_presence(self, username: str | None, status: str | None = None) -> ChatPresence:
        """Record a heartbeat for ``username``, creating its presence row if new."""
        name = (username or "").strip()
        if not name:
            raise ValidationError("Username is required")
        high = settings.chat_nickname_max_length
        if len(name) > high:
            raise ValidationError(f"Username too long (max {high} characters)")
        state = (status or "").strip() or DEFAULT_PRESENCE_STATUS
        if len(state) > PRESENCE_STATUS_MAX_LENGTH:
            raise ValidationError(
                f"Status too long (max {PRESENCE_STATUS_MAX_LENGTH} characters)"
            )

        insert = pg_insert if self.db.get_bind().dialect.name == "postgresql" else sqlite_insert
        stmt = insert(ChatPresence).values(username=name, status=state, last_seen=self._clock())
        stmt = stmt.on_conflict_do_update(
            index_elements=[ChatPresence.username],
            set_={"status": stmt.excluded.status, "last_seen": stmt.excluded.last_seen},
        )
        with storage_errors("update presence", self.db):
            self.db.execute(stmt)
            self.db.commit()
            return self.db.scalars(
                select(ChatPresence).where(ChatPresence.username == name)
            ).one()

    def online_users(self, window_seconds: float | None = None) -> list[ChatPresence]:
        """Return users seen within the presence window, ordered by name."""
        window = settings.chat_presence_window_seconds if window_seconds is None else window_seconds
        cutoff = self._clock() - timedelta(seconds=window)
        with storage_errors("fetch online users", self.db):
            return list(
                self.db.scalars(
                    select(ChatPresence)
                    .where(ChatPresence.last_seen >= cutoff)
                    .order_by(ChatPresence.username)
                )
            )
