"""Fixed-window rate limiting for write endpoints.

Limiters are created on application startup, stored on ``app.state`` and
handed to endpoints through a dependency, so the in-process backend can be
swapped for the Redis backend without touching call sites.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock
from typing import Any, Protocol

import redis

from denominator_stage.core.errors import RateLimitedError
from denominator_stage.core.settings import Settings

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class RateLimitPolicy:
    """How many requests a key may make per window."""

    name: str
    max_requests: int
    window_seconds: float


@dataclass
class RateLimitWindow:
    """Counter state for a single key."""

    count: int
    reset_at: float


class RateLimiter(Protocol):
    """Interface shared by all limiter backends."""

    policy: RateLimitPolicy

    def hit(self, key: str) -> bool:
        """Record a request for ``key`` and return True if it is allowed."""
        ...

    def sweep(self) -> int:
        """Drop expired state and return how many entries were removed."""
        ...


class InMemoryRateLimiter:
    """Process-local fixed-window limiter.

    State is lost on restart and not shared between instances; a stale entry
    that the sweeper has not reached yet resets itself on the next hit.
    """

    def __init__(self, policy: RateLimitPolicy, clock: Clock = time.monotonic) -> None:
        self.policy = policy
        self._clock = clock
        self._windows: dict[str, RateLimitWindow] = {}
        self._lock = Lock()

    def hit(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now > window.reset_at:
                self._windows[key] = RateLimitWindow(
                    count=1, reset_at=now + self.policy.window_seconds
                )
                return True
            if window.count >= self.policy.max_requests:
                return False
            window.count += 1
            return True

    def retry_after(self, key: str) -> float | None:
        """Return seconds until ``key``'s window resets, if it has one."""
        with self._lock:
            window = self._windows.get(key)
            if window is None:
                return None
            return max(0.0, window.reset_at - self._clock())

    def sweep(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [key for key, window in self._windows.items() if now > window.reset_at]
            for key in expired:
                del self._windows[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)


class RedisRateLimiter:
    """Fixed-window limiter shared by every instance through Redis.

    ``INCR`` and the first ``EXPIRE`` run in one pipeline so the counter and
    its reset time are created together.
    """

    def __init__(self, policy: RateLimitPolicy, client: Any) -> None:
        self.policy = policy
        self._redis = client

    def _key(self, key: str) -> str:
        return f"ratelimit:{self.policy.name}:{key}"

    def hit(self, key: str) -> bool:
        redis_key = self._key(key)
        window_ms = max(1, int(self.policy.window_seconds * 1000))
        pipe = self._redis.pipeline()
        pipe.incr(redis_key)
        pipe.pexpire(redis_key, window_ms, nx=True)
        count, _ = pipe.execute()
        return int(count) <= self.policy.max_requests

    def retry_after(self, key: str) -> float | None:
        remaining_ms = self._redis.pttl(self._key(key))
        if remaining_ms is None or remaining_ms < 0:
            return None
        return remaining_ms / 1000.0

    def sweep(self) -> int:
        # Redis expires keys on its own.
        return 0


class RateLimiterRegistry:
    """Named limiters for the chat, comment and subscribe paths."""

    def __init__(self, limiters: dict[str, RateLimiter]) -> None:
        self._limiters = limiters

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock = time.monotonic) -> RateLimiterRegistry:
        """Build the configured backend for every policy."""
        policies = [
            RateLimitPolicy(
                "chat",
                settings.chat_rate_limit_max_requests,
                settings.chat_rate_limit_window_seconds,
            ),
            RateLimitPolicy(
                "comment",
                settings.comment_rate_limit_max_requests,
                settings.comment_rate_limit_window_seconds,
            ),
            RateLimitPolicy(
                "subscribe",
                settings.subscribe_rate_limit_max_requests,
                settings.subscribe_rate_limit_window_seconds,
            ),
        ]
        limiters: dict[str, RateLimiter] = {}
        if settings.rate_limit_backend == "redis":
            client = redis.from_url(settings.redis_url)  # type: ignore[no-untyped-call]
            for policy in policies:
                limiters[policy.name] = RedisRateLimiter(policy, client)
        else:
            for policy in policies:
                limiters[policy.name] = InMemoryRateLimiter(policy, clock=clock)
        return cls(limiters)

    def __getitem__(self, name: str) -> RateLimiter:
        return self._limiters[name]

    def check(self, name: str, key: str) -> None:
        """Count a request against ``name`` for ``key``.

        Raises:
            RateLimitedError: If the key has used up its window.
        """
        limiter = self._limiters[name]
        if limiter.hit(key):
            return
        logger.debug("Rate limit %s exceeded for %s", name, key)
        retry_after = getattr(limiter, "retry_after", lambda _key: None)(key)
        raise RateLimitedError(
            "Too many requests. Please try again later.",
            retry_after=retry_after,
        )

    def sweep(self) -> int:
        """Sweep every limiter and return the total number of removed entries."""
        return sum(limiter.sweep() for limiter in self._limiters.values())


class RateLimitSweeper:
    """Background task that periodically drops expired limiter windows."""

    def __init__(self, registry: RateLimiterRegistry, interval_seconds: float) -> None:
        self.registry = registry
        self.interval = max(0.1, float(interval_seconds))
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    async def start(self) -> None:
        """Start the sweep loop."""
        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the sweep loop and wait for it to exit."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
            except TimeoutError:
                removed = self.registry.sweep()
                if removed:
                    logger.debug("Swept %d expired rate limit windows", removed)
