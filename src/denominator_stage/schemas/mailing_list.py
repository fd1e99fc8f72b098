"""Mailing list schemas."""
from __future__ import annotations

from pydantic import BaseModel, Field, StrictBool


class SubscribeRequest(BaseModel):
    """Subscribe or unsubscribe a contact.

    ``email`` is accepted for older clients that predate phone support.
    """

    contact: str | None = None
    email: str | None = None
    subscribed: StrictBool = True

    @property
    def resolved_contact(self) -> str | None:
        return self.contact if self.contact and self.contact.strip() else self.email


class SubscribeResponse(BaseModel):
    message: str
    subscribed: bool
    contact_kind: str = Field(..., description="email or phone")
