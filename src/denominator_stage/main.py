# src/denominator_stage/main.py
"""Main entry point for the Denominator Stage application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from denominator_stage.api.v1 import (
    admin_router,
    auth_router,
    chat_router,
    comments_router,
    engagement_router,
    mailing_list_router,
    posts_router,
)
from denominator_stage.core.errors import RateLimitedError, StageError
from denominator_stage.core.settings import settings
from denominator_stage.db.session import create_tables, engine
from denominator_stage.services.publish_scheduler import PublishSweepWorker
from denominator_stage.services.rate_limit import RateLimiterRegistry, RateLimitSweeper

logger = logging.getLogger(__name__)

DESCRIPTION = "Blog, discussion and mailing list API"


def configure_logging() -> None:
    """Apply the configured log level to the root logger."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


# Initialize FastAPI app
app = FastAPI(
    title="Denominator API",
    description=DESCRIPTION,
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(engagement_router, prefix="/api/v1")
app.include_router(chat_router, prefix="/api/v1")
app.include_router(mailing_list_router, prefix="/api/v1")


@app.exception_handler(StageError)
async def handle_stage_error(request: Request, exc: StageError) -> JSONResponse:
    """Translate domain errors into JSON responses."""
    headers: dict[str, str] = {}
    if isinstance(exc, RateLimitedError) and exc.retry_after is not None:
        headers["Retry-After"] = str(max(1, round(exc.retry_after)))
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    if engine.dialect.name == "sqlite":
        # Local development runs without migrations.
        create_tables()

    registry = RateLimiterRegistry.from_settings(settings)
    app.state.rate_limiters = registry
    sweeper = RateLimitSweeper(registry, settings.rate_limit_sweep_interval_seconds)
    await sweeper.start()
    app.state.rate_limit_sweeper = sweeper

    if settings.publish_sweep_enabled:
        worker = PublishSweepWorker()
        await worker.start()
        app.state.publish_worker = worker
    else:
        app.state.publish_worker = None
    logger.info("%s %s started", settings.app_name, settings.app_version)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: PublishSweepWorker | None = getattr(app.state, "publish_worker", None)
    if worker:
        await worker.stop()
    sweeper: RateLimitSweeper | None = getattr(app.state, "rate_limit_sweeper", None)
    if sweeper:
        await sweeper.stop()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": DESCRIPTION,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("denominator_stage.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
