"""Rate limiting hook consulted before authentication and authorization.

The engine only needs to ask "is this identity currently throttled?".
Identities are namespaced keys such as ``ip:10.0.0.1``, ``user:<id>`` or
``tenant:<id>``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from shared_kernel.exceptions import RateLimitedError


@dataclass(frozen=True)
class RetryAfter:
    """Rate limit retry-after information."""

    seconds: int


class RateLimiter(Protocol):
    """Rate limiter interface."""

    async def is_throttled(self, identity: str) -> RetryAfter | None:
        """Count a request for an identity and check its quota.

        Args:
            identity: Namespaced rate limit key

        Returns:
            RetryAfter if over quota, None if allowed
        """
        ...


def _utc_now() -> datetime:
    return datetime.now(UTC)


class FixedWindowRateLimiter:
    """In-memory fixed window rate limiter.

    Each identity namespace (the part before the first colon) has its own
    request limit per window. Namespaces without a configured limit are
    never throttled. Windows that have ended are swept out at most once per
    window length, so idle identities do not accumulate.
    """

    def __init__(
        self,
        limits: dict[str, int],
        window_seconds: int = 60,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize the limiter.

        Args:
            limits: Maximum requests per window, keyed by namespace
            window_seconds: Window length in seconds
            clock: Source of the current time, injectable for tests
        """
        self._limits = dict(limits)
        self._window = timedelta(seconds=window_seconds)
        self._clock = clock
        self._windows: dict[str, tuple[datetime, int]] = {}
        self._next_sweep: datetime | None = None
        self._lock = asyncio.Lock()

    async def is_throttled(self, identity: str) -> RetryAfter | None:
        limit = self._limits.get(identity.split(":", 1)[0])
        if limit is None:
            return None

        async with self._lock:
            now = self._clock()
            self._sweep(now)
            window_start, count = self._windows.get(identity, (now, 0))

            if now >= window_start + self._window:
                window_start, count = now, 0

            if count >= limit:
                seconds_remaining = int(
                    (window_start + self._window - now).total_seconds()
                )
                return RetryAfter(seconds=max(1, seconds_remaining))

            self._windows[identity] = (window_start, count + 1)
            return None

    def __len__(self) -> int:
        return len(self._windows)

    def _sweep(self, now: datetime) -> None:
        if self._next_sweep is not None and now < self._next_sweep:
            return
        self._windows = {
            identity: (start, count)
            for identity, (start, count) in self._windows.items()
            if now < start + self._window
        }
        self._next_sweep = now + self._window


async def enforce_rate_limit(limiter: RateLimiter, *identities: str) -> None:
    """Raise RateLimitedError if any of the identities is throttled."""
    for identity in identities:
        retry_after = await limiter.is_throttled(identity)
        if retry_after is not None:
            raise RateLimitedError(retry_after_seconds=retry_after.seconds)
