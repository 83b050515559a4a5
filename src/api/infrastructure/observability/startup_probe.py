"""Domain probe for application lifecycle and request failure events.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events during startup and shutdown, and the failures
the exception handlers turn into HTTP responses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class StartupProbe(Protocol):
    """Domain probe for application lifecycle operations."""

    def application_started(self, version: str) -> None:
        """Record that the application finished starting."""
        ...

    def permission_table_validated(self, roles: int, resource_types: int) -> None:
        """Record that the role permission table passed validation."""
        ...

    def row_isolation_installed(self) -> None:
        """Record that the row isolation listeners were installed."""
        ...

    def application_stopped(self) -> None:
        """Record that the application shut down."""
        ...

    def request_rejected(self, error_code: str, status_code: int, path: str) -> None:
        """Record a request that ended in a client-visible error."""
        ...

    def request_faulted(self, error_code: str, path: str, error: Exception) -> None:
        """Record a request that ended in an internal fault."""
        ...

    def with_context(self, context: ObservationContext) -> StartupProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultStartupProbe:
    """Default implementation of StartupProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultStartupProbe:
        """Create a new probe with observation context bound."""
        return DefaultStartupProbe(logger=self._logger, context=context)

    def application_started(self, version: str) -> None:
        """Record that the application finished starting."""
        self._logger.info(
            "application_started",
            version=version,
            **self._get_context_kwargs(),
        )

    def permission_table_validated(self, roles: int, resource_types: int) -> None:
        """Record that the role permission table passed validation."""
        self._logger.info(
            "permission_table_validated",
            roles=roles,
            resource_types=resource_types,
            **self._get_context_kwargs(),
        )

    def row_isolation_installed(self) -> None:
        """Record that the row isolation listeners were installed."""
        self._logger.info(
            "row_isolation_installed",
            **self._get_context_kwargs(),
        )

    def application_stopped(self) -> None:
        """Record that the application shut down."""
        self._logger.info(
            "application_stopped",
            **self._get_context_kwargs(),
        )

    def request_rejected(self, error_code: str, status_code: int, path: str) -> None:
        """Record a request that ended in a client-visible error."""
        self._logger.info(
            "request_rejected",
            error_code=error_code,
            status_code=status_code,
            path=path,
            **self._get_context_kwargs(),
        )

    def request_faulted(self, error_code: str, path: str, error: Exception) -> None:
        """Record a request that ended in an internal fault."""
        self._logger.error(
            "request_faulted",
            error_code=error_code,
            path=path,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
