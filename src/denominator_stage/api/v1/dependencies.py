"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from denominator_stage.core.security import decode_access_token, verify_admin_secret
from denominator_stage.core.settings import settings
from denominator_stage.db.session import get_db
from denominator_stage.services.cache import CacheInvalidator, get_cache_invalidator
from denominator_stage.services.identity import RequestIdentity
from denominator_stage.services.moderation import Moderator, get_moderator
from denominator_stage.services.rate_limit import RateLimiterRegistry

# Session tokens are optional; anonymous readers send only X-Client-Id.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str | None:
    """Return the user id from a bearer token, or None when no token is sent.

    Raises:
        HTTPException: If a token is sent but cannot be validated.
    """
    if credentials is None:
        return None
    try:
        return decode_access_token(credentials.credentials)
    except JWTError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err


def get_request_identity(
    user_id: Annotated[str | None, Depends(get_current_user_id)],
    x_client_id: Annotated[str | None, Header()] = None,
    x_admin_secret: Annotated[str | None, Header()] = None,
) -> RequestIdentity:
    """Collect everything the request says about its caller."""
    is_admin = verify_admin_secret(x_admin_secret) or bool(
        user_id and user_id in settings.site_admin_user_ids
    )
    return RequestIdentity(
        user_id=user_id,
        client_id=(x_client_id or "").strip() or None,
        is_admin=is_admin,
    )


def require_admin(
    x_admin_secret: Annotated[str | None, Header()] = None,
) -> None:
    """Reject the request unless it carries the configured admin secret."""
    if not verify_admin_secret(x_admin_secret):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )


def get_rate_limiters(request: Request) -> RateLimiterRegistry:
    """Return the limiter registry created on application startup."""
    registry: RateLimiterRegistry | None = getattr(request.app.state, "rate_limiters", None)
    if registry is None:
        registry = RateLimiterRegistry.from_settings(settings)
        request.app.state.rate_limiters = registry
    return registry


def client_address(
    x_forwarded_for: Annotated[str | None, Header()] = None,
    x_real_ip: Annotated[str | None, Header()] = None,
) -> str:
    """Best-effort network address of the caller for rate limiting."""
    if x_forwarded_for:
        first = x_forwarded_for.split(",")[0].strip()
        if first:
            return first
    if x_real_ip and x_real_ip.strip():
        return x_real_ip.strip()
    return "unknown"


IdentityDep = Annotated[RequestIdentity, Depends(get_request_identity)]
AdminDep = Annotated[None, Depends(require_admin)]
RateLimitersDep = Annotated[RateLimiterRegistry, Depends(get_rate_limiters)]
ModeratorDep = Annotated[Moderator, Depends(get_moderator)]
CacheDep = Annotated[CacheInvalidator, Depends(get_cache_invalidator)]
ClientAddressDep = Annotated[str, Depends(client_address)]
