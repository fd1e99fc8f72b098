"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .chat import (
    ChatHistoryResponse,
    ChatMessageCreate,
    ChatMessageResponse,
    OnlineUsersResponse,
    PresenceResponse,
    PresenceUpdate,
    PresenceUpdateResponse,
)
from .comment import CommentCreate, CommentListResponse, CommentResponse
from .common import (
    AdminLoginRequest,
    AdminLoginResponse,
    AdminSecretRequest,
    AdminSecretResponse,
    ClientIdResponse,
    MessageResponse,
)
from .engagement import ActorRequest, LikeResponse, ShareCreate, ShareResponse
from .mailing_list import SubscribeRequest, SubscribeResponse
from .post import (
    PostCreate,
    PostResponse,
    PostUpdate,
    PublishDueResponse,
    PublishedPostRef,
    PublishRequest,
)

__all__ = [
    "ActorRequest",
    "AdminLoginRequest", "AdminLoginResponse",
    "AdminSecretRequest", "AdminSecretResponse",
    "ChatHistoryResponse", "ChatMessageCreate", "ChatMessageResponse",
    "ClientIdResponse",
    "CommentCreate", "CommentListResponse", "CommentResponse",
    "LikeResponse",
    "MessageResponse",
    "OnlineUsersResponse",
    "PostCreate", "PostResponse", "PostUpdate",
    "PresenceResponse", "PresenceUpdate", "PresenceUpdateResponse",
    "PublishDueResponse", "PublishRequest", "PublishedPostRef",
    "ShareCreate", "ShareResponse",
    "SubscribeRequest", "SubscribeResponse",
]
