"""Background worker that runs the publish sweep on an interval.

The sweep itself lives on ``PostLifecycleService``; this module only owns the
timer. External schedulers can call ``POST /api/v1/posts/publish-due`` or the
``denominator-publish-due`` script instead.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from sqlalchemy.orm import Session

from denominator_stage.core.errors import StorageFailure
from denominator_stage.core.settings import settings
from denominator_stage.db.session import SessionLocal
from denominator_stage.services.cache import CacheInvalidator, get_cache_invalidator
from denominator_stage.services.posts import PostLifecycleService

logger = logging.getLogger(__name__)


def run_publish_sweep(
    session_factory: Callable[[], Session] = SessionLocal,
    invalidator: CacheInvalidator | None = None,
) -> list[str]:
    """Run one sweep in a fresh session and return the ids it published."""
    with session_factory() as db:
        service = PostLifecycleService(db, invalidator or get_cache_invalidator())
        return [post.id for post in service.sweep()]


class PublishSweepWorker:
    """Periodically publishes scheduled posts whose time has come."""

    def __init__(
        self,
        interval_seconds: float | None = None,
        session_factory: Callable[[], Session] = SessionLocal,
    ) -> None:
        interval = settings.publish_sweep_interval_seconds if interval_seconds is None else interval_seconds
        self.interval = max(0.1, float(interval))
        self._session_factory = session_factory
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    async def start(self) -> None:
        """Start the background sweep loop."""
        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background sweep loop."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None

    async def run_once(self) -> list[str]:
        """Run a single sweep off the event loop."""
        return await asyncio.to_thread(run_publish_sweep, self._session_factory)

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await self.run_once()
            except StorageFailure as exc:
                # Already logged with detail; the next tick retries.
                logger.warning("Publish sweep failed: %s", exc)
            except (OSError, ConnectionError, TimeoutError) as exc:
                logger.warning("Publish sweep encountered network error: %s", exc)
            except Exception as exc:
                logger.error("Publish sweep encountered unexpected error: %s", exc, exc_info=True)
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
            except TimeoutError:
                continue
