"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .auth import router as auth_router
from .chat import router as chat_router
from .comments import router as comments_router
from .engagement import router as engagement_router
from .mailing_list import router as mailing_list_router
from .posts import router as posts_router

__all__ = [
    "admin_router",
    "auth_router",
    "chat_router",
    "comments_router",
    "engagement_router",
    "mailing_list_router",
    "posts_router",
]
