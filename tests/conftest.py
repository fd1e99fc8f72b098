# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterable, Iterator
from datetime import timedelta
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BLOG_ADMIN_SECRET", "test-admin-secret")
os.environ.setdefault("ADMIN_PASSWORD", "test-admin-password")
os.environ.setdefault("SITE_ADMIN_USER_IDS", "site-admin")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PUBLISH_SWEEP_ENABLED", "false")
os.environ.setdefault("RATE_LIMIT_BACKEND", "memory")

from denominator_stage.core.security import create_access_token
from denominator_stage.db.session import Base, enable_sqlite_savepoints
from denominator_stage.db.session import get_db as app_get_session
from denominator_stage.db.time import utcnow
from denominator_stage.main import app as fastapi_app
from denominator_stage.models import Post
from denominator_stage.schemas.post import PostCreate
from denominator_stage.services.cache import get_cache_invalidator
from denominator_stage.services.posts import PostLifecycleService

TEST_DB_URL = "sqlite://"
ADMIN_SECRET = "test-admin-secret"
CLIENT_ID = "client_1700000000000_abcdefghi"
OTHER_CLIENT_ID = "client_1700000000001_zyxwvutsr"


class RecordingInvalidator:
    """Cache invalidator that remembers every purge request."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []

    def invalidate(self, paths: Iterable[str]) -> None:
        self.calls.append(sorted(set(paths)))

    @property
    def paths(self) -> set[str]:
        return {path for call in self.calls for path in call}


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    session = Session(bind=engine, autoflush=False)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def invalidator() -> RecordingInvalidator:
    return RecordingInvalidator()


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    invalidator: RecordingInvalidator,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_cache_invalidator] = lambda: invalidator
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_cache_invalidator, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def admin_headers() -> dict[str, str]:
    """Return headers carrying the admin secret."""
    return {"X-Admin-Secret": ADMIN_SECRET}


@pytest.fixture()
def client_headers() -> dict[str, str]:
    """Return headers identifying the primary anonymous client."""
    return {"X-Client-Id": CLIENT_ID}


@pytest.fixture()
def other_client_headers() -> dict[str, str]:
    """Return headers identifying a second anonymous client."""
    return {"X-Client-Id": OTHER_CLIENT_ID}


@pytest.fixture()
def user_headers() -> Callable[[str], dict[str, str]]:
    """Return a factory for bearer headers of a signed-in user."""

    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _headers


@pytest.fixture()
def post_service(db_session: Session, invalidator: RecordingInvalidator) -> PostLifecycleService:
    return PostLifecycleService(db_session, invalidator)


@pytest.fixture()
def make_post(post_service: PostLifecycleService) -> Callable[..., Post]:
    """Create posts through the lifecycle service.

    ``visible=True`` publishes the post an hour in the past so it is public.
    """

    def _make(title: str = "Hello World", *, visible: bool = True, **fields: Any) -> Post:
        data: dict[str, Any] = {
            "title": title,
            "excerpt": f"Excerpt for {title}",
            "content": "word " * 450,
        }
        if visible:
            data["status"] = "published"
            data["publish_at"] = utcnow() - timedelta(hours=1)
        data.update(fields)
        return post_service.create(PostCreate(**data))

    return _make


@pytest.fixture()
def published_post(make_post: Callable[..., Post]) -> Post:
    """Create a publicly visible post."""
    return make_post("Published Thoughts")
