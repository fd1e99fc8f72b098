"""Post lifecycle: creation, edits, scheduling and the publish sweep.

A post moves between three publication states::

    DRAFT ──publish(publish_at <= now or unset)──▶ PUBLISHED
    DRAFT ──publish(publish_at > now)───────────▶ SCHEDULED(t)
    SCHEDULED(t) ──sweep at now >= t────────────▶ PUBLISHED
    PUBLISHED / SCHEDULED ──unpublish───────────▶ DRAFT

SCHEDULED is stored as ``status = published`` with a future ``publish_at``
and no ``published_at``. All transitions go through ``apply_publication`` so
the three timestamp fields can never disagree.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Callable, Iterable
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from denominator_stage.core.errors import ConflictError, NotFoundError, ValidationError, storage_errors
from denominator_stage.db.time import as_utc, utcnow
from denominator_stage.models.post import POST_STATUS_DRAFT, POST_STATUS_PUBLISHED, Post
from denominator_stage.services.cache import (
    LISTING_PATHS,
    CacheInvalidator,
    LoggingCacheInvalidator,
    post_paths,
)

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from denominator_stage.schemas.post import PostCreate, PostUpdate

logger = logging.getLogger(__name__)

SLUG_MAX_LENGTH = 100
WORDS_PER_MINUTE = 200
DEFAULT_AUTHOR_NAME = "Anonymous"

_SLUG_STRIP = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


class PublicationState(str, Enum):
    """Derived publication state of a post at a given instant."""

    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"


def slugify(title: str) -> str:
    """Derive a post id from its title."""
    slug = _SLUG_STRIP.sub("", title.lower().strip())
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    return slug[:SLUG_MAX_LENGTH]


def calculate_read_time(content: str) -> int:
    """Return reading time in whole minutes at 200 words per minute, minimum 1."""
    words = len(content.split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def parse_tags(raw: Iterable[str] | str | None) -> list[str]:
    """Return tags as a list, accepting a JSON array string or a sequence."""
    if raw is None:
        return []
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except ValueError:
            return []
        if not isinstance(decoded, list):
            return []
        raw = [str(item) for item in decoded]
    return list(raw)


def canonical_tags(raw: Iterable[str] | str | None) -> str:
    """Serialize tags as a JSON array of unique, trimmed, non-empty strings.

    First occurrence wins so the author's ordering is kept.
    """
    seen: dict[str, None] = {}
    for tag in parse_tags(raw):
        cleaned = tag.strip()
        if cleaned:
            seen.setdefault(cleaned, None)
    return json.dumps(list(seen), ensure_ascii=False)


def publication_state(post: Post, now: datetime) -> PublicationState:
    """Return which state ``post`` is in at ``now``."""
    if post.status != POST_STATUS_PUBLISHED:
        return PublicationState.DRAFT
    publish_at = as_utc(post.publish_at)
    if publish_at is not None and publish_at > as_utc(now):  # type: ignore[operator]
        return PublicationState.SCHEDULED
    return PublicationState.PUBLISHED


def is_publicly_visible(post: Post, now: datetime) -> bool:
    """Return True if ordinary readers may see ``post`` at ``now``."""
    return publication_state(post, now) is PublicationState.PUBLISHED


def visible_clause(now: datetime) -> ColumnElement[bool]:
    """SQL form of ``is_publicly_visible``."""
    return (Post.status == POST_STATUS_PUBLISHED) & or_(
        Post.publish_at.is_(None),
        Post.publish_at <= now,
    )


def apply_publication(
    post: Post,
    status: str,
    publish_at: datetime | None,
    now: datetime,
) -> None:
    """Move ``post`` to ``status`` and reconcile its timestamp fields.

    Drafts never keep scheduling data. A future ``publish_at`` makes the post
    scheduled again, dropping any earlier publication stamp so the sweep
    publishes it when due. Otherwise ``published_at`` is set only the first
    time the post becomes visible and survives later edits.
    """
    if status == POST_STATUS_DRAFT:
        post.status = POST_STATUS_DRAFT
        post.publish_at = None
        post.published_at = None
        post.publish_date = None
        return

    post.status = POST_STATUS_PUBLISHED
    post.publish_at = publish_at
    if publish_at is not None and as_utc(publish_at) > as_utc(now):  # type: ignore[operator]
        post.published_at = None
        post.publish_date = None
    elif post.published_at is None:
        post.published_at = now
        post.publish_date = now


class PostLifecycleService:
    """Owns every write to the ``posts`` table."""

    def __init__(
        self,
        db: Session,
        invalidator: CacheInvalidator | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.invalidator = invalidator or LoggingCacheInvalidator()
        self._clock = clock

    # --- reads --------------------------------------------------------------------
    def get(self, post_id: str) -> Post:
        """Return a post regardless of visibility (editor preview)."""
        with storage_errors("fetch post", self.db):
            post = self.db.get(Post, post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    def get_public(self, post_id: str, now: datetime | None = None) -> Post:
        """Return a post only if it is publicly visible.

        Drafts and not-yet-due posts are reported exactly like missing ones.
        """
        now = now or self._clock()
        with storage_errors("fetch post", self.db):
            post = self.db.get(Post, post_id)
        if post is None or not is_publicly_visible(post, now):
            raise NotFoundError("Post not found")
        return post

    def list_public(
        self,
        *,
        tag: str | None = None,
        search: str | None = None,
        limit: int = 50,
        now: datetime | None = None,
    ) -> list[Post]:
        """Return visible posts, newest first."""
        now = now or self._clock()
        stmt = select(Post).where(visible_clause(now))
        if tag:
            stmt = stmt.where(Post.tags.contains(json.dumps(tag, ensure_ascii=False), autoescape=True))
        if search:
            stmt = stmt.where(
                or_(
                    Post.title.icontains(search, autoescape=True),
                    Post.excerpt.icontains(search, autoescape=True),
                )
            )
        sort_key = func.coalesce(Post.publish_date, Post.publish_at, Post.created_at)
        stmt = stmt.order_by(sort_key.desc(), Post.id).limit(limit)
        with storage_errors("list posts", self.db):
            return list(self.db.scalars(stmt))

    def list_all(self) -> list[Post]:
        """Return every post for the admin dashboard, most recently edited first."""
        with storage_errors("list posts", self.db):
            return list(self.db.scalars(select(Post).order_by(Post.updated_at.desc())))

    # --- writes -------------------------------------------------------------------
    def create(self, data: PostCreate) -> Post:
        """Create a draft, published or scheduled post.

        Raises:
            ValidationError: If a required field is blank, the title yields an
                empty slug, or a published post has no ``publish_at``.
            ConflictError: If the slug is already taken.
        """
        title, excerpt, content = data.title, data.excerpt, data.content
        if not (title and title.strip()) or not (excerpt and excerpt.strip()) or not (
            content and content.strip()
        ):
            raise ValidationError(
                "Missing required fields: title, excerpt, and content are required"
            )

        slug = slugify(data.id or title)
        if not slug:
            raise ValidationError("Title must contain at least one letter or digit")

        status = data.status or POST_STATUS_DRAFT
        if status == POST_STATUS_PUBLISHED and data.publish_at is None:
            raise ValidationError("publish_at is required when status is published")

        now = self._clock()
        with storage_errors("create post", self.db):
            if self.db.get(Post, slug) is not None:
                raise self._conflict(slug, now)

            post = Post(
                id=slug,
                title=title,
                excerpt=excerpt,
                content=content,
                tags=canonical_tags(data.tags),
                read_time=calculate_read_time(content),
                author_name=data.author_name or DEFAULT_AUTHOR_NAME,
                cover_image_url=data.cover_image_url,
                created_at=now,
                updated_at=now,
            )
            apply_publication(post, status, data.publish_at, now)
            self.db.add(post)
            try:
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                raise self._conflict(slug, now) from exc
            self.db.refresh(post)

        logger.info("Created post %s (%s)", post.id, publication_state(post, now).value)
        if is_publicly_visible(post, now):
            self.invalidator.invalidate(post_paths(post.id))
        return post

    def update(self, post_id: str, changes: PostUpdate) -> Post:
        """Apply a partial update; fields absent from ``changes`` are untouched."""
        fields = changes.model_dump(exclude_unset=True)
        now = self._clock()
        post = self.get(post_id)

        for name in ("title", "excerpt", "author_name", "cover_image_url"):
            if name in fields:
                value = fields[name]
                if name in ("title", "excerpt") and not (value and value.strip()):
                    raise ValidationError(f"{name} cannot be empty")
                setattr(post, name, value if name != "author_name" else value or DEFAULT_AUTHOR_NAME)

        if "content" in fields:
            content = fields["content"]
            if not (content and content.strip()):
                raise ValidationError("content cannot be empty")
            post.content = content
            post.read_time = calculate_read_time(content)

        if "tags" in fields:
            post.tags = canonical_tags(fields["tags"])

        if "status" in fields or "publish_at" in fields:
            status = fields.get("status") or post.status
            publish_at = fields["publish_at"] if "publish_at" in fields else as_utc(post.publish_at)
            apply_publication(post, status, publish_at, now)

        post.updated_at = now
        self._commit(post, "update post")
        logger.info("Updated post %s (%s)", post.id, publication_state(post, now).value)
        self.invalidator.invalidate(post_paths(post.id))
        return post

    def publish(self, post_id: str, publish_at: datetime | None = None) -> Post:
        """Publish now, or schedule for ``publish_at``."""
        now = self._clock()
        post = self.get(post_id)
        apply_publication(post, POST_STATUS_PUBLISHED, publish_at, now)
        post.updated_at = now
        self._commit(post, "publish post")
        logger.info("Published post %s (%s)", post.id, publication_state(post, now).value)
        self.invalidator.invalidate(post_paths(post.id))
        return post

    def unpublish(self, post_id: str) -> Post:
        """Return a post to draft, clearing its schedule."""
        now = self._clock()
        post = self.get(post_id)
        apply_publication(post, POST_STATUS_DRAFT, None, now)
        post.updated_at = now
        self._commit(post, "unpublish post")
        logger.info("Unpublished post %s", post.id)
        self.invalidator.invalidate(post_paths(post.id))
        return post

    def delete(self, post_id: str) -> None:
        """Hard-delete a post and everything attached to it."""
        post = self.get(post_id)
        with storage_errors("delete post", self.db):
            self.db.delete(post)
            self.db.commit()
        logger.info("Deleted post %s", post_id)
        self.invalidator.invalidate(post_paths(post_id))

    def sweep(self, now: datetime | None = None) -> list[Post]:
        """Stamp ``published_at`` on every scheduled post whose time has come.

        Each row is claimed with a conditional UPDATE, so concurrent or repeated
        sweeps publish a post at most once. No due posts is an empty result.
        """
        now = now or self._clock()
        published_ids: list[str] = []
        with storage_errors("publish due posts", self.db):
            due_ids = self.db.scalars(
                select(Post.id).where(
                    Post.status == POST_STATUS_PUBLISHED,
                    Post.publish_at.is_not(None),
                    Post.publish_at <= now,
                    Post.published_at.is_(None),
                )
            ).all()
            for post_id in due_ids:
                result: Any = self.db.execute(
                    update(Post)
                    .where(Post.id == post_id, Post.published_at.is_(None))
                    .values(published_at=now, publish_date=now, updated_at=now)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 1:
                    published_ids.append(post_id)
            self.db.commit()
            posts = [post for post_id in published_ids if (post := self.db.get(Post, post_id))]

        logger.info("Published %d due post(s): %s", len(published_ids), published_ids)
        if published_ids:
            paths: list[str] = list(LISTING_PATHS)
            for post_id in published_ids:
                paths.extend(post_paths(post_id))
            self.invalidator.invalidate(paths)
        return posts

    # --- helpers ------------------------------------------------------------------
    def _commit(self, post: Post, operation: str) -> None:
        with storage_errors(operation, self.db):
            self.db.commit()
            self.db.refresh(post)

    @staticmethod
    def _conflict(slug: str, now: datetime) -> ConflictError:
        suggested = f"{slug[: SLUG_MAX_LENGTH - 14]}-{int(now.timestamp() * 1000)}"
        return ConflictError(
            f"A post with this title already exists. Suggested slug: {suggested}",
            suggested_id=suggested,
        )
