"""Cache invalidation for rendered blog pages.

The frontend caches rendered post pages and listings. Every mutation that
changes what the public can see names the paths to purge.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from functools import lru_cache
from typing import Protocol

import httpx

from denominator_stage.core.settings import settings

logger = logging.getLogger(__name__)

LISTING_PATHS: tuple[str, ...] = ("/", "/blog")


def post_paths(post_id: str) -> list[str]:
    """Return every rendered path that includes ``post_id``."""
    return [*LISTING_PATHS, f"/blog/{post_id}"]


class CacheInvalidator(Protocol):
    """Purges cached renderings for a set of paths."""

    def invalidate(self, paths: Iterable[str]) -> None: ...


class LoggingCacheInvalidator:
    """Default collaborator that only records the purge."""

    def invalidate(self, paths: Iterable[str]) -> None:
        logger.info("Cache invalidation requested for %s", sorted(set(paths)))


class WebhookCacheInvalidator:
    """POSTs the paths to the frontend's revalidation endpoint.

    Failures are logged and never fail the mutation that triggered them.
    """

    def __init__(self, url: str, timeout: float = 5.0, client: httpx.Client | None = None) -> None:
        self.url = url
        self._client = client or httpx.Client(timeout=timeout)

    def invalidate(self, paths: Iterable[str]) -> None:
        unique = sorted(set(paths))
        try:
            response = self._client.post(self.url, json={"paths": unique})
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Cache revalidation for %s failed: %s", unique, exc)


@lru_cache(maxsize=1)
def get_cache_invalidator() -> CacheInvalidator:
    """Return the configured cache invalidator."""
    if settings.cache_revalidate_url:
        return WebhookCacheInvalidator(
            settings.cache_revalidate_url,
            timeout=settings.cache_revalidate_timeout_seconds,
        )
    return LoggingCacheInvalidator()
