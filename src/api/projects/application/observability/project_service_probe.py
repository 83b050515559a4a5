"""Protocol for project application service observability.

Defines the interface for domain probes that capture application-level
domain events for project service operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ProjectServiceProbe(Protocol):
    """Domain probe for project application service operations."""

    def project_created(self, project_id: str, tenant_id: str, owner_id: str) -> None:
        """Record that a project was created."""
        ...

    def project_updated(self, project_id: str, tenant_id: str) -> None:
        """Record that a project was updated."""
        ...

    def project_deleted(self, project_id: str, tenant_id: str) -> None:
        """Record that a project was deleted."""
        ...

    def projects_listed(self, total: int, visible: int) -> None:
        """Record a project listing and how much of it the caller could see."""
        ...

    def assignee_added(self, project_id: str, user_id: str) -> None:
        """Record that a user was assigned to a project."""
        ...

    def assignee_removed(self, project_id: str, user_id: str) -> None:
        """Record that a user's assignment was removed."""
        ...

    def assignee_not_in_tenant(self, project_id: str, user_id: str) -> None:
        """Record an assignment attempt for a user outside the tenant."""
        ...

    def with_context(self, context: ObservationContext) -> ProjectServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultProjectServiceProbe:
    """Default implementation of ProjectServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultProjectServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultProjectServiceProbe(logger=self._logger, context=context)

    def project_created(self, project_id: str, tenant_id: str, owner_id: str) -> None:
        """Record that a project was created."""
        self._logger.info(
            "project_created",
            project_id=project_id,
            tenant_id=tenant_id,
            owner_id=owner_id,
            **self._get_context_kwargs(),
        )

    def project_updated(self, project_id: str, tenant_id: str) -> None:
        """Record that a project was updated."""
        self._logger.info(
            "project_updated",
            project_id=project_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def project_deleted(self, project_id: str, tenant_id: str) -> None:
        """Record that a project was deleted."""
        self._logger.info(
            "project_deleted",
            project_id=project_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def projects_listed(self, total: int, visible: int) -> None:
        """Record a project listing and how much of it the caller could see."""
        self._logger.debug(
            "projects_listed",
            total=total,
            visible=visible,
            **self._get_context_kwargs(),
        )

    def assignee_added(self, project_id: str, user_id: str) -> None:
        """Record that a user was assigned to a project."""
        self._logger.info(
            "project_assignee_added",
            project_id=project_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def assignee_removed(self, project_id: str, user_id: str) -> None:
        """Record that a user's assignment was removed."""
        self._logger.info(
            "project_assignee_removed",
            project_id=project_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def assignee_not_in_tenant(self, project_id: str, user_id: str) -> None:
        """Record an assignment attempt for a user outside the tenant."""
        self._logger.warning(
            "project_assignee_not_in_tenant",
            project_id=project_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )
