# src/denominator_stage/api/v1/endpoints/admin.py
"""Editor dashboard endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Response

from denominator_stage.schemas.post import PostResponse

from ..dependencies import AdminDep
from .posts import NO_STORE, PostServiceDep

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/posts", response_model=list[PostResponse])
async def list_all_posts(service: PostServiceDep, response: Response, _: AdminDep) -> list[PostResponse]:
    """List every post, including drafts and scheduled posts."""
    response.headers["Cache-Control"] = NO_STORE
    return [PostResponse.model_validate(post) for post in service.list_all()]
