# src/denominator_stage/api/v1/endpoints/engagement.py
"""Like and share endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from denominator_stage.schemas.engagement import ActorRequest, LikeResponse, ShareCreate, ShareResponse

from ..dependencies import IdentityDep
from .comments import LedgerDep

router = APIRouter(prefix="/posts/{post_id}", tags=["engagement"])


@router.post("/like", response_model=LikeResponse)
async def toggle_like(
    post_id: str,
    ledger: LedgerDep,
    identity: IdentityDep,
    body: ActorRequest | None = None,
) -> LikeResponse:
    """Like the post, or remove the caller's existing like."""
    actor = identity.with_client_id(body.client_id if body else None).actor
    return LikeResponse.model_validate(ledger.toggle_like(post_id, actor))


@router.get("/like", response_model=LikeResponse)
async def like_status(
    post_id: str,
    ledger: LedgerDep,
    identity: IdentityDep,
    client_id: str | None = None,
) -> LikeResponse:
    """Report whether the caller has liked the post."""
    actor = identity.with_client_id(client_id).actor
    return LikeResponse.model_validate(ledger.like_state(post_id, actor))


@router.post("/share", response_model=ShareResponse, status_code=status.HTTP_201_CREATED)
async def share_post(
    post_id: str,
    body: ShareCreate,
    ledger: LedgerDep,
    identity: IdentityDep,
) -> ShareResponse:
    """Record that the caller shared the post."""
    actor = identity.with_client_id(body.client_id).actor
    return ShareResponse.model_validate(ledger.log_share(post_id, actor, body.channel))
