# src/denominator_stage/models/__init__.py
"""SQLAlchemy models for the Denominator application."""

from .chat import ChatMessage, ChatPresence
from .comment import PostComment
from .like import PostLike
from .post import Post
from .share import PostShareEvent
from .subscriber import MailingListSubscriber

__all__ = [
    "ChatMessage",
    "ChatPresence",
    "MailingListSubscriber",
    "Post",
    "PostComment",
    "PostLike",
    "PostShareEvent",
]
