"""Domain error taxonomy shared by services and the API layer.

Services raise these exceptions; the FastAPI application maps each class to
an HTTP status code in a single exception handler so that endpoint code never
has to translate storage or validation failures by hand.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class StageError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, object]:
        """Return the JSON body sent to the client."""
        return {"detail": self.message}


class ValidationError(StageError):
    """Missing or malformed input; recoverable by the caller."""

    status_code = 400


class AuthorizationError(StageError):
    """Missing or incorrect credentials."""

    status_code = 401


class ForbiddenError(StageError):
    """Credentials are valid but do not grant this action."""

    status_code = 403


class NotFoundError(StageError):
    """Resource does not exist or is not visible to the caller."""

    status_code = 404


class ConflictError(StageError):
    """Resource identity already taken; carries a suggested alternative."""

    status_code = 409

    def __init__(self, message: str, *, suggested_id: str | None = None) -> None:
        super().__init__(message)
        self.suggested_id = suggested_id

    def to_payload(self) -> dict[str, object]:
        payload = super().to_payload()
        if self.suggested_id is not None:
            payload["suggested_id"] = self.suggested_id
        return payload


class RateLimitedError(StageError):
    """Caller exceeded its request budget for the current window."""

    status_code = 429

    def __init__(self, message: str, *, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class FeatureUnavailableError(StageError):
    """Request is valid but the feature is disabled in this deployment."""

    status_code = 501


class StorageFailure(StageError):
    """The persistence layer returned an unexpected error."""

    status_code = 500


@contextmanager
def storage_errors(operation: str, db: Session | None = None) -> Iterator[None]:
    """Convert SQLAlchemy failures into ``StorageFailure``.

    The full error is logged server-side; the raised exception carries only a
    generic message so schema details never reach the client.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        if db is not None:
            db.rollback()
        logger.error("Storage failure during %s: %s", operation, exc, exc_info=True)
        raise StorageFailure(f"Failed to {operation}. Please try again.") from exc
