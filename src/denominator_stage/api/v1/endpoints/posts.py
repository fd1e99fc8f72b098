# src/denominator_stage/api/v1/endpoints/posts.py
"""Post endpoints: public reads and admin lifecycle operations."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from denominator_stage.schemas.post import (
    PostCreate,
    PostResponse,
    PostUpdate,
    PublishDueResponse,
    PublishedPostRef,
    PublishRequest,
)
from denominator_stage.services.posts import PostLifecycleService

from ..dependencies import AdminDep, CacheDep, SessionDep

router = APIRouter(prefix="/posts", tags=["posts"])

NO_STORE = "no-store"


def get_post_service(db: SessionDep, invalidator: CacheDep) -> PostLifecycleService:
    """Return a lifecycle service bound to the request session."""
    return PostLifecycleService(db, invalidator)


PostServiceDep = Annotated[PostLifecycleService, Depends(get_post_service)]


@router.get("/", response_model=list[PostResponse])
async def list_posts(
    service: PostServiceDep,
    response: Response,
    tag: str | None = None,
    search: str | None = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
) -> list[PostResponse]:
    """List publicly visible posts, newest first."""
    response.headers["Cache-Control"] = NO_STORE
    posts = service.list_public(tag=tag, search=search, limit=limit)
    return [PostResponse.model_validate(post) for post in posts]


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    service: PostServiceDep,
    _: AdminDep,
) -> PostResponse:
    """Create a post. Duplicate titles get a 409 with a suggested id."""
    post = service.create(post_data)
    return PostResponse.model_validate(post)


@router.post("/publish-due", response_model=PublishDueResponse)
async def publish_due(service: PostServiceDep, _: AdminDep) -> PublishDueResponse:
    """Publish every scheduled post whose time has come."""
    published = service.sweep()
    return PublishDueResponse(
        message=f"Published {len(published)} post(s)",
        published=[PublishedPostRef.model_validate(post) for post in published],
    )


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: str, service: PostServiceDep, response: Response) -> PostResponse:
    """Return a post if it is publicly visible."""
    response.headers["Cache-Control"] = NO_STORE
    return PostResponse.model_validate(service.get_public(post_id))


@router.get("/{post_id}/preview", response_model=PostResponse)
async def preview_post(
    post_id: str,
    service: PostServiceDep,
    response: Response,
    _: AdminDep,
) -> PostResponse:
    """Return a post regardless of its publication state."""
    response.headers["Cache-Control"] = NO_STORE
    return PostResponse.model_validate(service.get(post_id))


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str,
    changes: PostUpdate,
    service: PostServiceDep,
    _: AdminDep,
) -> PostResponse:
    """Apply a partial update to a post."""
    return PostResponse.model_validate(service.update(post_id, changes))


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: str, service: PostServiceDep, _: AdminDep) -> Response:
    """Permanently delete a post with its comments, likes and shares."""
    service.delete(post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{post_id}/publish", response_model=PostResponse)
async def publish_post(
    post_id: str,
    service: PostServiceDep,
    _: AdminDep,
    body: PublishRequest | None = None,
) -> PostResponse:
    """Publish a post now, or schedule it when ``publish_at`` is in the future."""
    publish_at = body.publish_at if body is not None else None
    return PostResponse.model_validate(service.publish(post_id, publish_at))


@router.post("/{post_id}/unpublish", response_model=PostResponse)
async def unpublish_post(post_id: str, service: PostServiceDep, _: AdminDep) -> PostResponse:
    """Return a post to draft."""
    return PostResponse.model_validate(service.unpublish(post_id))
