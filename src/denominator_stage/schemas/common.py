"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Plain acknowledgement returned by mutations without a body."""

    message: str = Field(..., description="Human-readable result.")


class ClientIdResponse(BaseModel):
    """Newly issued anonymous client id."""

    client_id: str


class AdminSecretRequest(BaseModel):
    """Body for validating the admin secret without a header."""

    secret: str | None = None


class AdminSecretResponse(BaseModel):
    valid: bool


class AdminLoginRequest(BaseModel):
    password: str | None = None


class AdminLoginResponse(BaseModel):
    authenticated: bool
