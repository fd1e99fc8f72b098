"""Actor identities and anonymous client id issuance.

Every write path is attributed to exactly one actor: an authenticated user
or an anonymous browser client. ``RequestIdentity`` carries everything the
transport layer learned about the caller; ``Actor`` is the single identity a
row is attributed to.
"""

from __future__ import annotations

import secrets
import string
import time
from dataclasses import dataclass

from denominator_stage.core.errors import ValidationError

_BASE36 = string.digits + string.ascii_lowercase
CLIENT_ID_SUFFIX_LENGTH = 9


@dataclass(frozen=True)
class AuthenticatedActor:
    """A signed-in user."""

    user_id: str

    @property
    def kind(self) -> str:
        return "user"

    @property
    def key(self) -> str:
        return f"user:{self.user_id}"


@dataclass(frozen=True)
class AnonymousActor:
    """An unauthenticated browser identified by its client id."""

    client_id: str

    @property
    def kind(self) -> str:
        return "client"

    @property
    def key(self) -> str:
        return f"client:{self.client_id}"


Actor = AuthenticatedActor | AnonymousActor


@dataclass(frozen=True)
class RequestIdentity:
    """Everything known about the caller of a single request."""

    user_id: str | None = None
    client_id: str | None = None
    is_admin: bool = False

    def with_client_id(self, client_id: str | None) -> RequestIdentity:
        """Return a copy that falls back to ``client_id`` when none was sent."""
        if self.client_id or not client_id:
            return self
        return RequestIdentity(user_id=self.user_id, client_id=client_id, is_admin=self.is_admin)

    @property
    def actor(self) -> Actor:
        """Return the actor writes are attributed to.

        A session user always wins over the anonymous client id.

        Raises:
            ValidationError: If the caller supplied neither identity.
        """
        if self.user_id:
            return AuthenticatedActor(self.user_id)
        if self.client_id:
            return AnonymousActor(self.client_id)
        raise ValidationError("client_id is required")


def issue_client_id(now_ms: int | None = None) -> str:
    """Return a new anonymous client id such as ``client_1718000000000_k3j9x0a1b``."""
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(CLIENT_ID_SUFFIX_LENGTH))
    return f"client_{timestamp}_{suffix}"
