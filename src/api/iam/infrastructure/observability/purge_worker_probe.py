"""Domain probe for the background replay store purge."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ReplayStorePurgeProbe(Protocol):
    """Domain probe for the replay store purge worker."""

    def worker_started(self, interval_seconds: float) -> None:
        """Record that the purge loop started."""
        ...

    def worker_stopped(self) -> None:
        """Record that the purge loop stopped."""
        ...

    def purge_completed(self, removed: int) -> None:
        """Record one purge pass and how many entries it dropped."""
        ...

    def purge_failed(self, error: Exception) -> None:
        """Record that a purge pass could not reach the store."""
        ...

    def with_context(self, context: ObservationContext) -> ReplayStorePurgeProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultReplayStorePurgeProbe:
    """Default implementation of ReplayStorePurgeProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(
        self, context: ObservationContext
    ) -> DefaultReplayStorePurgeProbe:
        """Create a new probe with observation context bound."""
        return DefaultReplayStorePurgeProbe(logger=self._logger, context=context)

    def worker_started(self, interval_seconds: float) -> None:
        self._logger.info(
            "replay_store_purge_started",
            interval_seconds=interval_seconds,
            **self._get_context_kwargs(),
        )

    def worker_stopped(self) -> None:
        self._logger.info("replay_store_purge_stopped", **self._get_context_kwargs())

    def purge_completed(self, removed: int) -> None:
        self._logger.debug(
            "replay_store_purged",
            removed=removed,
            **self._get_context_kwargs(),
        )

    def purge_failed(self, error: Exception) -> None:
        self._logger.warning(
            "replay_store_purge_failed",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
