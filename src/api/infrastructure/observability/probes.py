"""Domain probes for infrastructure observability.

Domain probes provide a high-level instrumentation API oriented around
domain semantics, keeping infrastructure code clean and testable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ConnectionProbe(Protocol):
    """Domain probe for database connection observability.

    This probe captures domain-significant events related to database
    connections without exposing logging implementation details.
    """

    def connection_established(self, host: str, database: str) -> None:
        """Record that a database connection was successfully established."""
        ...

    def connection_failed(self, host: str, database: str, error: Exception) -> None:
        """Record that a database connection attempt failed."""
        ...

    def pool_closed(self) -> None:
        """Record that the connection pool was closed."""
        ...

    def with_context(self, context: ObservationContext) -> ConnectionProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultConnectionProbe:
    """Default implementation of ConnectionProbe using structlog.

    Supports observation context for including request-scoped metadata
    with all log events.
    """

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

    def with_context(self, context: ObservationContext) -> DefaultConnectionProbe:
        """Create a new probe with observation context bound."""
        return DefaultConnectionProbe(logger=self._logger, context=context)

    def connection_established(self, host: str, database: str) -> None:
        """Record that a database connection was successfully established."""
        self._logger.info(
            "database_connection_established",
            host=host,
            database=database,
            **self._get_context_kwargs(),
        )

    def connection_failed(self, host: str, database: str, error: Exception) -> None:
        """Record that a database connection attempt failed."""
        self._logger.error(
            "database_connection_failed",
            host=host,
            database=database,
            error=str(error),
            **self._get_context_kwargs(),
        )

    def pool_closed(self) -> None:
        """Record that the connection pool was closed."""
        self._logger.info(
            "connection_pool_closed",
            **self._get_context_kwargs(),
        )


class RowIsolationProbe(Protocol):
    """Domain probe for tenant row isolation at the data-access boundary.

    Every event here is either routine scoping (debug) or a blocked
    attempt to cross a tenant boundary, which is always worth a warning.
    """

    def statement_scoped(self, tenant_id: str, entities: list[str]) -> None:
        """Record that an ORM statement was scoped to a tenant."""
        ...

    def context_missing(self, operation: str, entities: list[str]) -> None:
        """Record that storage was touched without a bound AuthContext."""
        ...

    def context_expired(self, tenant_id: str, user_id: str) -> None:
        """Record that a session's AuthContext expired mid-transaction."""
        ...

    def tenant_overridden(self, entity: str, supplied: str, bound: str) -> None:
        """Record that a client-supplied tenant_id was replaced on insert."""
        ...

    def tenant_change_discarded(self, entity: str, resource_id: str) -> None:
        """Record that an attempt to move a row to another tenant was undone."""
        ...

    def cross_tenant_write_blocked(
        self, entity: str, resource_id: str, tenant_id: str
    ) -> None:
        """Record that a write to another tenant's row was refused."""
        ...

    def insert_refused(self, entity: str) -> None:
        """Record that an insert into a request-protected table was refused."""
        ...

    def bulk_write_refused(self, entity: str, operation: str) -> None:
        """Record that a bulk statement against isolated rows was refused."""
        ...

    def immutable_write_blocked(self, entity: str, operation: str) -> None:
        """Record that an update or delete of append-only rows was refused."""
        ...

    def session_variables_set(self, tenant_id: str) -> None:
        """Record that transaction-local tenant variables were set."""
        ...

    def session_variables_cleared(self) -> None:
        """Record that transaction-local tenant variables were cleared."""
        ...

    def with_context(self, context: ObservationContext) -> RowIsolationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRowIsolationProbe:
    """Default implementation of RowIsolationProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultRowIsolationProbe:
        """Create a new probe with observation context bound."""
        return DefaultRowIsolationProbe(logger=self._logger, context=context)

    def statement_scoped(self, tenant_id: str, entities: list[str]) -> None:
        """Record that an ORM statement was scoped to a tenant."""
        self._logger.debug(
            "row_isolation_statement_scoped",
            tenant_id=tenant_id,
            entities=entities,
            **self._get_context_kwargs(),
        )

    def context_missing(self, operation: str, entities: list[str]) -> None:
        """Record that storage was touched without a bound AuthContext."""
        self._logger.error(
            "row_isolation_context_missing",
            operation=operation,
            entities=entities,
            **self._get_context_kwargs(),
        )

    def context_expired(self, tenant_id: str, user_id: str) -> None:
        """Record that a session's AuthContext expired mid-transaction."""
        self._logger.warning(
            "row_isolation_context_expired",
            tenant_id=tenant_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def tenant_overridden(self, entity: str, supplied: str, bound: str) -> None:
        """Record that a client-supplied tenant_id was replaced on insert."""
        self._logger.warning(
            "row_isolation_tenant_overridden",
            entity=entity,
            supplied_tenant_id=supplied,
            bound_tenant_id=bound,
            **self._get_context_kwargs(),
        )

    def tenant_change_discarded(self, entity: str, resource_id: str) -> None:
        """Record that an attempt to move a row to another tenant was undone."""
        self._logger.warning(
            "row_isolation_tenant_change_discarded",
            entity=entity,
            resource_id=resource_id,
            **self._get_context_kwargs(),
        )

    def cross_tenant_write_blocked(
        self, entity: str, resource_id: str, tenant_id: str
    ) -> None:
        """Record that a write to another tenant's row was refused."""
        self._logger.warning(
            "row_isolation_cross_tenant_write_blocked",
            entity=entity,
            resource_id=resource_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def insert_refused(self, entity: str) -> None:
        """Record that an insert into a request-protected table was refused."""
        self._logger.warning(
            "row_isolation_insert_refused",
            entity=entity,
            **self._get_context_kwargs(),
        )

    def bulk_write_refused(self, entity: str, operation: str) -> None:
        """Record that a bulk statement against isolated rows was refused."""
        self._logger.error(
            "row_isolation_bulk_write_refused",
            entity=entity,
            operation=operation,
            **self._get_context_kwargs(),
        )

    def immutable_write_blocked(self, entity: str, operation: str) -> None:
        """Record that an update or delete of append-only rows was refused."""
        self._logger.error(
            "row_isolation_immutable_write_blocked",
            entity=entity,
            operation=operation,
            **self._get_context_kwargs(),
        )

    def session_variables_set(self, tenant_id: str) -> None:
        """Record that transaction-local tenant variables were set."""
        self._logger.debug(
            "row_isolation_session_variables_set",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def session_variables_cleared(self) -> None:
        """Record that transaction-local tenant variables were cleared."""
        self._logger.debug(
            "row_isolation_session_variables_cleared",
            **self._get_context_kwargs(),
        )
