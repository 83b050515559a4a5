"""Background purge of expired replay store entries.

The purger runs as a background task within the FastAPI application and
periodically drops token records whose retention has run out, so the
replay store does not grow with every token it has ever seen.
"""

from __future__ import annotations

import asyncio

from iam.infrastructure.observability import (
    DefaultReplayStorePurgeProbe,
    ReplayStorePurgeProbe,
)
from shared_kernel.auth.replay_store import ReplayStore, ReplayStoreUnavailableError


class ReplayStorePurger:
    """Periodically calls ``purge_expired`` on a replay store."""

    def __init__(
        self,
        store: ReplayStore,
        interval_seconds: float = 300,
        probe: ReplayStorePurgeProbe | None = None,
    ) -> None:
        """Initialize the purger.

        Args:
            store: The replay store to keep bounded
            interval_seconds: Pause between purge passes
            probe: Optional domain probe for observability
        """
        self._store = store
        self._interval = interval_seconds
        self._probe = probe or DefaultReplayStorePurgeProbe()
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the purge loop; a second call is a no-op."""
        if self.running:
            return
        self._probe.worker_started(interval_seconds=self._interval)
        self._task = asyncio.create_task(self._purge_loop())

    async def stop(self) -> None:
        """Cancel the purge loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self._probe.worker_stopped()

    async def purge_once(self) -> int:
        """Run one purge pass.

        An unreachable store is reported and retried on the next pass.

        Returns:
            Number of entries removed
        """
        try:
            removed = await self._store.purge_expired()
        except ReplayStoreUnavailableError as e:
            self._probe.purge_failed(e)
            return 0
        self._probe.purge_completed(removed)
        return removed

    async def _purge_loop(self) -> None:
        while True:
            await self.purge_once()
            await asyncio.sleep(self._interval)
