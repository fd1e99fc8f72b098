"""Credential helpers for admin secrets and user session tokens."""
from __future__ import annotations

import secrets
from datetime import timedelta

from jose import JWTError, jwt

from denominator_stage.core.settings import settings
from denominator_stage.db.time import utcnow


def verify_admin_secret(candidate: str | None) -> bool:
    """Return True if ``candidate`` matches the configured admin secret.

    An unset server secret rejects every caller.
    """
    expected = settings.blog_admin_secret
    if not candidate or not expected:
        return False
    return secrets.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


def verify_admin_password(candidate: str | None) -> bool:
    """Return True if ``candidate`` matches the configured admin password."""
    expected = settings.admin_password
    if not candidate or not expected:
        return False
    return secrets.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


def create_access_token(user_id: str, expires_minutes: int | None = None) -> str:
    """Create a signed session token whose subject is ``user_id``."""
    minutes = expires_minutes or settings.access_token_expire_minutes
    expire = utcnow() + timedelta(minutes=minutes)
    payload = {"sub": user_id, "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str:
    """Return the user id carried by ``token``.

    Raises:
        JWTError: If the token is invalid, expired or has no subject.
    """
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    subject = payload.get("sub")
    if not subject:
        raise JWTError("Token has no subject")
    return str(subject)
