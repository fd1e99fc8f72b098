"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    auth_router,
    chat_router,
    comments_router,
    engagement_router,
    mailing_list_router,
    posts_router,
)

__all__ = [
    "admin_router",
    "auth_router",
    "chat_router",
    "comments_router",
    "engagement_router",
    "mailing_list_router",
    "posts_router",
]
