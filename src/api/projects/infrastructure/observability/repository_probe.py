"""Domain probe for project repository operations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ProjectRepositoryProbe(Protocol):
    """Domain probe for project repository operations."""

    def project_saved(self, project_id: str, tenant_id: str) -> None:
        """Record that a project was successfully saved."""
        ...

    def project_retrieved(self, project_id: str) -> None:
        """Record that a project was retrieved."""
        ...

    def project_not_found(self, project_id: str) -> None:
        """Record that a project was not found (or is in another tenant)."""
        ...

    def project_deleted(self, project_id: str) -> None:
        """Record that a project was deleted."""
        ...

    def with_context(self, context: ObservationContext) -> ProjectRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultProjectRepositoryProbe:
    """Default implementation of ProjectRepositoryProbe using structlog."""

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

    def with_context(
        self, context: ObservationContext
    ) -> DefaultProjectRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultProjectRepositoryProbe(logger=self._logger, context=context)

    def project_saved(self, project_id: str, tenant_id: str) -> None:
        """Record that a project was successfully saved."""
        self._logger.info(
            "project_saved",
            project_id=project_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def project_retrieved(self, project_id: str) -> None:
        """Record that a project was retrieved."""
        self._logger.debug(
            "project_retrieved",
            project_id=project_id,
            **self._get_context_kwargs(),
        )

    def project_not_found(self, project_id: str) -> None:
        """Record that a project was not found (or is in another tenant)."""
        self._logger.debug(
            "project_not_found",
            project_id=project_id,
            **self._get_context_kwargs(),
        )

    def project_deleted(self, project_id: str) -> None:
        """Record that a project was deleted."""
        self._logger.info(
            "project_deleted",
            project_id=project_id,
            **self._get_context_kwargs(),
        )
