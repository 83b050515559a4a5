"""Authorization decision engine.

Combines the static role permission table with resource tenancy and
ownership. The decision procedure runs in a fixed, short-circuiting order:

1. Tenant boundary: a targeted resource that is absent or belongs to a
   different tenant yields NOT_FOUND.
2. Role permission: a role the table does not permit yields FORBIDDEN.
3. Ownership/assignment (skipped for tenant admins): a targeted resource
   the caller neither owns nor is assigned to yields NOT_FOUND.
4. Otherwise ALLOWED.

FORBIDDEN is only produced when the role is categorically disallowed; any
question about whether a specific resource exists is answered NOT_FOUND.
Collection actions (list, create) have no target, so steps 1 and 3 do not
apply to them.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, TypeVar

from shared_kernel.audit import AuditDecision, AuditEvent, AuditRecorder
from shared_kernel.authorization.observability import (
    AuthorizationProbe,
    DefaultAuthorizationProbe,
)
from shared_kernel.authorization.permissions import PermissionPolicy
from shared_kernel.authorization.protocols import ProtectedResource
from shared_kernel.authorization.types import (
    Action,
    DecisionOutcome,
    ResourceType,
)
from shared_kernel.exceptions import (
    AuthenticationFailedError,
    ConfigurationFaultError,
    ForbiddenError,
    ResourceNotFoundError,
)
from shared_kernel.middleware.context_propagation import current_request_id

if TYPE_CHECKING:
    from shared_kernel.auth.auth_context import AuthContext

R = TypeVar("R", bound=ProtectedResource)

_ERROR_CODES = {
    DecisionOutcome.ALLOWED: None,
    DecisionOutcome.FORBIDDEN: ForbiddenError.error_code,
    DecisionOutcome.NOT_FOUND: ResourceNotFoundError.error_code,
}


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class AuthorizationDecision:
    """Result of evaluating one authorization request.

    Attributes:
        outcome: Allowed, forbidden or not found
        action: The requested action
        resource_type: The resource type acted on
        resource_id: Target resource identifier, if any
        reason: Internal reason for the outcome (logged, never returned)
    """

    outcome: DecisionOutcome
    action: Action
    resource_type: ResourceType
    resource_id: str | None
    reason: str

    @property
    def allowed(self) -> bool:
        """Whether the request was allowed."""
        return self.outcome is DecisionOutcome.ALLOWED

    @property
    def error_code(self) -> str | None:
        """Stable error code for a denied decision."""
        return _ERROR_CODES[self.outcome]


class AuthorizationEngine:
    """Makes and records authorization decisions for an AuthContext."""

    def __init__(
        self,
        recorder: AuditRecorder,
        policy: PermissionPolicy | None = None,
        probe: AuthorizationProbe | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize the engine.

        Args:
            recorder: Audit sink receiving one event per decision
            policy: Role permission table (validated on construction)
            probe: Optional domain probe for observability
            clock: Source of the current time, injectable for tests
        """
        self._recorder = recorder
        self._policy = policy or PermissionPolicy()
        self._probe = probe or DefaultAuthorizationProbe()
        self._clock = clock

    def evaluate(
        self,
        context: AuthContext,
        action: Action,
        resource_type: ResourceType,
        *,
        resource: ProtectedResource | None = None,
        resource_id: str | None = None,
    ) -> AuthorizationDecision:
        """Evaluate an authorization request without side effects.

        For actions that target a single resource, ``resource`` is the
        loaded resource, or None if the lookup found nothing.

        Args:
            context: The caller's AuthContext
            action: The requested action
            resource_type: The resource type acted on
            resource: The target resource for targeted actions
            resource_id: Identifier of the target, used for auditing

        Returns:
            The AuthorizationDecision

        Raises:
            AuthenticationFailedError: If the context has expired
            ConfigurationFaultError: If ``resource`` does not implement
                the ProtectedResource capability
        """
        if context.is_expired(self._clock()):
            self._probe.expired_context_rejected(
                tenant_id=context.tenant_id, user_id=context.user_id
            )
            raise AuthenticationFailedError()

        if resource is not None and not isinstance(resource, ProtectedResource):
            raise ConfigurationFaultError(
                f"{type(resource).__name__} does not implement ProtectedResource"
            )

        targeted = not action.is_collection_action

        def decide(outcome: DecisionOutcome, reason: str) -> AuthorizationDecision:
            return AuthorizationDecision(
                outcome=outcome,
                action=action,
                resource_type=resource_type,
                resource_id=resource_id,
                reason=reason,
            )

        if targeted and (
            resource is None or not resource.belongs_to_tenant(context.tenant_id)
        ):
            return decide(DecisionOutcome.NOT_FOUND, "tenant_boundary")

        if not self._policy.permits(context.role, action, resource_type):
            return decide(DecisionOutcome.FORBIDDEN, "role_not_permitted")

        if (
            targeted
            and resource is not None
            and not context.role.bypasses_ownership
            and not self._is_owner_or_assignee(resource, context.user_id)
        ):
            return decide(DecisionOutcome.NOT_FOUND, "not_owner_or_assignee")

        return decide(DecisionOutcome.ALLOWED, "granted")

    async def authorize(
        self,
        context: AuthContext,
        action: Action,
        resource_type: ResourceType,
        *,
        resource: ProtectedResource | None = None,
        resource_id: str | None = None,
        request_id: str | None = None,
    ) -> AuthorizationDecision:
        """Evaluate an authorization request and record exactly one audit event.

        Args:
            context: The caller's AuthContext
            action: The requested action
            resource_type: The resource type acted on
            resource: The target resource for targeted actions
            resource_id: Identifier of the target, used for auditing
            request_id: Correlation id; defaults to the bound request's id

        Returns:
            The AuthorizationDecision
        """
        decision = self.evaluate(
            context,
            action,
            resource_type,
            resource=resource,
            resource_id=resource_id,
        )

        self._probe.decision_made(
            tenant_id=context.tenant_id,
            user_id=context.user_id,
            role=context.role.value,
            action=action.value,
            resource_type=resource_type.value,
            resource_id=resource_id,
            outcome=decision.outcome.value,
            reason=decision.reason,
        )

        await self._recorder.record(
            context,
            AuditEvent(
                tenant_id=context.tenant_id,
                user_id=context.user_id,
                action=f"{resource_type}.{action}",
                resource_type=resource_type.value,
                resource_id=resource_id,
                decision=AuditDecision(decision.outcome.value),
                timestamp=self._clock(),
                request_id=request_id or current_request_id(),
                error_code=decision.error_code,
            ),
        )
        return decision

    async def require(
        self,
        context: AuthContext,
        action: Action,
        resource_type: ResourceType,
        *,
        resource: ProtectedResource | None = None,
        resource_id: str | None = None,
        request_id: str | None = None,
    ) -> None:
        """Authorize a request, raising unless it is allowed.

        Raises:
            ForbiddenError: If the role lacks the action
            ResourceNotFoundError: If the target is absent, in another
                tenant, or not owned by or assigned to the caller
            AuthenticationFailedError: If the context has expired
        """
        decision = await self.authorize(
            context,
            action,
            resource_type,
            resource=resource,
            resource_id=resource_id,
            request_id=request_id,
        )
        if decision.outcome is DecisionOutcome.FORBIDDEN:
            raise ForbiddenError()
        if decision.outcome is DecisionOutcome.NOT_FOUND:
            raise ResourceNotFoundError()

    def filter_visible(self, context: AuthContext, resources: Iterable[R]) -> list[R]:
        """Keep only the resources the caller may see individually.

        Applies the tenant boundary and, for roles that do not bypass it,
        the ownership/assignment check to each resource of a listing.
        """
        visible = []
        for resource in resources:
            if not resource.belongs_to_tenant(context.tenant_id):
                continue
            if context.role.bypasses_ownership or self._is_owner_or_assignee(
                resource, context.user_id
            ):
                visible.append(resource)
        return visible

    @staticmethod
    def _is_owner_or_assignee(resource: ProtectedResource, user_id: str) -> bool:
        return resource.is_owned_by(user_id) or resource.is_assigned_to(user_id)
