# src/denominator_stage/api/v1/endpoints/auth.py
"""Admin credential checks and anonymous client id issuance."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status

from denominator_stage.core.errors import AuthorizationError, ValidationError
from denominator_stage.core.security import verify_admin_password, verify_admin_secret
from denominator_stage.schemas.common import (
    AdminLoginRequest,
    AdminLoginResponse,
    AdminSecretRequest,
    AdminSecretResponse,
    ClientIdResponse,
)
from denominator_stage.services.identity import issue_client_id

router = APIRouter(prefix="/auth", tags=["authentication"])
logger = logging.getLogger(__name__)


@router.post("/validate-admin", response_model=AdminSecretResponse)
async def validate_admin(body: AdminSecretRequest) -> AdminSecretResponse:
    """Check an admin secret so the editor can unlock its controls."""
    if not body.secret:
        raise ValidationError("Secret is required")
    if not verify_admin_secret(body.secret):
        logger.info("Rejected admin secret validation")
        raise AuthorizationError("Invalid admin secret")
    return AdminSecretResponse(valid=True)


@router.post("/admin-login", response_model=AdminLoginResponse)
async def admin_login(body: AdminLoginRequest) -> AdminLoginResponse:
    """Check the dashboard password. An unset password rejects everyone."""
    if not verify_admin_password(body.password):
        logger.info("Rejected admin dashboard login")
        raise AuthorizationError("Invalid password")
    return AdminLoginResponse(authenticated=True)


@router.post("/client-id", response_model=ClientIdResponse, status_code=status.HTTP_201_CREATED)
async def create_client_id() -> ClientIdResponse:
    """Issue a new anonymous client id for a browser without one."""
    return ClientIdResponse(client_id=issue_client_id())
