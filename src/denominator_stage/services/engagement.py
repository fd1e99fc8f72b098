"""Likes, shares and threaded comments on published posts.

Counters on ``posts`` are maintained with in-database ``UPDATE ... SET n = n + 1``
statements issued in the same transaction as the row they account for, so
``likes_count`` always equals the number of like rows for the post.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from denominator_stage.core.errors import ForbiddenError, NotFoundError, ValidationError, storage_errors
from denominator_stage.core.settings import settings
from denominator_stage.db.time import utcnow
from denominator_stage.models.comment import PostComment
from denominator_stage.models.like import PostLike
from denominator_stage.models.post import Post
from denominator_stage.models.share import SHARE_CHANNELS, PostShareEvent
from denominator_stage.services.identity import Actor, AuthenticatedActor, RequestIdentity
from denominator_stage.services.moderation import ContentModerator, Moderator
from denominator_stage.services.posts import is_publicly_visible

logger = logging.getLogger(__name__)

SHARE_CHANNEL_ALIASES = {"twitter": "x"}


@dataclass(frozen=True)
class LikeState:
    """Whether the actor likes the post, and the post's like total."""

    liked: bool
    likes_count: int


@dataclass(frozen=True)
class ShareReceipt:
    """Result of logging a share."""

    channel: str
    shares_count: int


def normalize_channel(channel: str | None) -> str:
    """Return the stored channel name for ``channel``.

    Raises:
        ValidationError: If the channel is not one of the known share targets.
    """
    value = (channel or "").strip().lower()
    value = SHARE_CHANNEL_ALIASES.get(value, value)
    if value not in SHARE_CHANNELS:
        raise ValidationError(
            f"Invalid share channel. Expected one of: {', '.join(SHARE_CHANNELS)}"
        )
    return value


class EngagementLedger:
    """Records reader engagement against publicly visible posts."""

    def __init__(
        self,
        db: Session,
        moderator: Moderator | None = None,
        *,
        admin_user_ids: Collection[str] | None = None,
        comment_max_length: int | None = None,
        nickname_max_length: int | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.moderator = moderator or ContentModerator()
        self.admin_user_ids = frozenset(
            settings.site_admin_user_ids if admin_user_ids is None else admin_user_ids
        )
        self.comment_max_length = comment_max_length or settings.comment_max_length
        self.nickname_max_length = nickname_max_length or settings.comment_nickname_max_length
        self._clock = clock

    def _visible_post(self, post_id: str) -> Post:
        with storage_errors("fetch post", self.db):
            post = self.db.get(Post, post_id)
        if post is None or not is_publicly_visible(post, self._clock()):
            raise NotFoundError("Post not found")
        return post

    def _bump(self, post_id: str, column: str, delta: int) -> None:
        counter = getattr(Post, column)
        stmt = update(Post).where(Post.id == post_id)
        if delta < 0:
            stmt = stmt.where(counter > 0)
        self.db.execute(
            stmt.values({column: counter + delta}).execution_options(synchronize_session=False)
        )

    def _likes_count(self, post_id: str) -> int:
        return int(self.db.scalar(select(Post.likes_count).where(Post.id == post_id)) or 0)

    # --- likes --------------------------------------------------------------------
    def _remove_like(self, post_id: str, actor: Actor) -> bool:
        result: Any = self.db.execute(
            delete(PostLike).where(
                PostLike.post_id == post_id,
                PostLike.actor_kind == actor.kind,
                PostLike.actor_id == _actor_id(actor),
            )
        )
        return result.rowcount == 1

    def _insert_like(self, post_id: str, actor: Actor) -> bool:
        try:
            with self.db.begin_nested():
                self.db.execute(
                    insert(PostLike).values(
                        post_id=post_id,
                        actor_kind=actor.kind,
                        actor_id=_actor_id(actor),
                        created_at=self._clock(),
                    )
                )
        except IntegrityError:
            # A concurrent toggle from the same actor inserted first.
            return False
        return True

    def toggle_like(self, post_id: str, actor: Actor) -> LikeState:
        """Like the post if ``actor`` has not, otherwise remove the like.

        The delete is attempted first; only a delete that actually removed a
        row decrements the counter, and only an insert that actually added one
        increments it. A losing concurrent insert is reported as liked.
        """
        self._visible_post(post_id)
        with storage_errors("toggle like", self.db):
            if self._remove_like(post_id, actor):
                self._bump(post_id, "likes_count", -1)
                liked = False
            else:
                if self._insert_like(post_id, actor):
                    self._bump(post_id, "likes_count", 1)
                liked = True
            self.db.commit()
            count = self._likes_count(post_id)
        logger.debug("Like on %s by %s is now %s", post_id, actor.key, liked)
        return LikeState(liked=liked, likes_count=count)

    def like_state(self, post_id: str, actor: Actor) -> LikeState:
        """Return whether ``actor`` currently likes the post."""
        self._visible_post(post_id)
        with storage_errors("fetch like", self.db):
            existing = self.db.get(PostLike, (post_id, actor.kind, _actor_id(actor)))
            count = self._likes_count(post_id)
        return LikeState(liked=existing is not None, likes_count=count)

    # --- shares -------------------------------------------------------------------
    def log_share(self, post_id: str, actor: Actor, channel: str | None) -> ShareReceipt:
        """Append a share event; repeated shares are distinct events."""
        stored_channel = normalize_channel(channel)
        self._visible_post(post_id)
        with storage_errors("log share", self.db):
            self.db.add(
                PostShareEvent(
                    post_id=post_id,
                    channel=stored_channel,
                    actor_kind=actor.kind,
                    actor_id=_actor_id(actor),
                    created_at=self._clock(),
                )
            )
            self._bump(post_id, "shares_count", 1)
            self.db.commit()
            count = int(self.db.scalar(select(Post.shares_count).where(Post.id == post_id)) or 0)
        return ShareReceipt(channel=stored_channel, shares_count=count)

    # --- comments -----------------------------------------------------------------
    def list_comments(self, post_id: str) -> list[PostComment]:
        """Return the post's non-deleted comments, oldest first."""
        self._visible_post(post_id)
        with storage_errors("list comments", self.db):
            return list(
                self.db.scalars(
                    select(PostComment)
                    .where(PostComment.post_id == post_id, PostComment.is_deleted.is_(False))
                    .order_by(PostComment.created_at, PostComment.id)
                )
            )

    def add_comment(
        self,
        post_id: str,
        actor: Actor,
        content: str | None,
        *,
        nickname: str | None = None,
        parent_id: int | None = None,
    ) -> PostComment:
        """Create a comment, flattening replies-to-replies onto the top-level comment.

        Raises:
            ValidationError: For empty, oversized or rejected text, or a parent
                that is missing, deleted or on another post.
            NotFoundError: If the post is not publicly visible.
        """
        body = (content or "").strip()
        if not body:
            raise ValidationError("Comment cannot be empty")
        if len(body) > self.comment_max_length:
            raise ValidationError(
                f"Comment too long (max {self.comment_max_length} characters)"
            )
        display_name = (nickname or "").strip() or None
        if display_name and len(display_name) > self.nickname_max_length:
            raise ValidationError(
                f"Nickname too long (max {self.nickname_max_length} characters)"
            )
        verdict = self.moderator.moderate(body)
        if not verdict.approved:
            raise ValidationError(verdict.reason or "Comment rejected")

        self._visible_post(post_id)
        with storage_errors("create comment", self.db):
            resolved_parent = self._resolve_parent(post_id, parent_id)
            comment = PostComment(
                post_id=post_id,
                parent_id=resolved_parent,
                nickname=display_name,
                content=body,
                created_at=self._clock(),
            )
            comment.author = actor
            self.db.add(comment)
            self._bump(post_id, "comments_count", 1)
            self.db.commit()
            self.db.refresh(comment)
        logger.info("Comment %s added to post %s", comment.id, post_id)
        return comment

    def _resolve_parent(self, post_id: str, parent_id: int | None) -> int | None:
        if parent_id is None:
            return None
        parent = self.db.get(PostComment, parent_id)
        if parent is None or parent.is_deleted or parent.post_id != post_id:
            raise ValidationError("Parent comment not found on this post")
        # Replies nest one level: a reply to a reply attaches to its top-level comment.
        return parent.parent_id if parent.parent_id is not None else parent.id

    def delete_comment(self, post_id: str, comment_id: int, identity: RequestIdentity) -> None:
        """Soft-delete a comment if ``identity`` may do so.

        Authorization is checked in order: site administrator, matching user id,
        matching anonymous client id.

        Raises:
            NotFoundError: If the comment does not exist on this post or is
                already deleted.
            ForbiddenError: If the caller is not allowed to delete it.
        """
        with storage_errors("fetch comment", self.db):
            comment = self.db.get(PostComment, comment_id)
        if comment is None or comment.post_id != post_id or comment.is_deleted:
            raise NotFoundError("Comment not found")
        if not self.can_delete(comment, identity):
            raise ForbiddenError("You can only delete your own comments")

        with storage_errors("delete comment", self.db):
            result: Any = self.db.execute(
                update(PostComment)
                .where(PostComment.id == comment_id, PostComment.is_deleted.is_(False))
                .values(is_deleted=True)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                self._bump(post_id, "comments_count", -1)
            self.db.commit()
        logger.info("Comment %s on post %s deleted", comment_id, post_id)

    def can_delete(self, comment: PostComment, identity: RequestIdentity) -> bool:
        """Return True if ``identity`` may delete ``comment``."""
        if identity.is_admin:
            return True
        if identity.user_id and identity.user_id in self.admin_user_ids:
            return True
        if identity.user_id and comment.user_id == identity.user_id:
            return True
        return bool(identity.client_id and comment.client_id == identity.client_id)


def _actor_id(actor: Actor) -> str:
    if isinstance(actor, AuthenticatedActor):
        return actor.user_id
    return actor.client_id
