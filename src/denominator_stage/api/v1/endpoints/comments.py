# src/denominator_stage/api/v1/endpoints/comments.py
"""Threaded comment endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from denominator_stage.schemas.comment import CommentCreate, CommentListResponse, CommentResponse
from denominator_stage.services.engagement import EngagementLedger

from ..dependencies import IdentityDep, ModeratorDep, RateLimitersDep, SessionDep

router = APIRouter(prefix="/posts/{post_id}/comments", tags=["comments"])


def get_ledger(db: SessionDep, moderator: ModeratorDep) -> EngagementLedger:
    """Return an engagement ledger bound to the request session."""
    return EngagementLedger(db, moderator)


LedgerDep = Annotated[EngagementLedger, Depends(get_ledger)]


@router.get("", response_model=CommentListResponse)
async def list_comments(post_id: str, ledger: LedgerDep) -> CommentListResponse:
    """List a post's comments, oldest first."""
    comments = ledger.list_comments(post_id)
    return CommentListResponse(
        comments=[CommentResponse.model_validate(comment) for comment in comments],
        count=len(comments),
    )


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    post_id: str,
    body: CommentCreate,
    ledger: LedgerDep,
    identity: IdentityDep,
    limiters: RateLimitersDep,
) -> CommentResponse:
    """Add a comment or a reply to a published post."""
    actor = identity.with_client_id(body.client_id).actor
    limiters.check("comment", actor.key)
    comment = ledger.add_comment(
        post_id,
        actor,
        body.content,
        nickname=body.nickname,
        parent_id=body.parent_id,
    )
    return CommentResponse.model_validate(comment)


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    post_id: str,
    comment_id: int,
    ledger: LedgerDep,
    identity: IdentityDep,
    client_id: str | None = None,
) -> Response:
    """Soft-delete a comment owned by the caller, or any comment for admins."""
    ledger.delete_comment(post_id, comment_id, identity.with_client_id(client_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
