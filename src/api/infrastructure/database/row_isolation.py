"""Row isolation enforced through SQLAlchemy ORM session events.

Independently of any authorization decision, every ORM statement and
every flush that touches a ``TenantIsolated`` model is constrained to the
tenant of the session's bound AuthContext:

- SELECTs get loader criteria for every isolated model, which also
  propagate to relationship and lazy loads.
- ORM bulk INSERT, UPDATE and DELETE statements against isolated models
  are refused. They would bypass the flush-time tenant assignment and
  tenant checks, and they produce no per-row mutation audit events.
  Against append-only models the refusal is an immutability error.
- At flush, new rows get the bound tenant id (a client-supplied value is
  discarded), writes to rows of another tenant are refused, and tenant
  changes are undone. Audited models queue one mutation event per row.

A session without a bound context cannot touch isolated models at all.
On PostgreSQL the same tenant is also published to the row level
security policies through transaction-local settings.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import event, inspect, text
from sqlalchemy.engine import Connection
from sqlalchemy.orm import ORMExecuteState, Session, SessionTransaction
from sqlalchemy.orm import with_loader_criteria
from sqlalchemy.orm.attributes import set_committed_value

from infrastructure.database.models import Base, TenantIsolated
from infrastructure.database.tenant_session import (
    COMMITTED_EVENTS_KEY,
    PENDING_EVENTS_KEY,
    get_binding,
    require_context,
)
from infrastructure.observability import DefaultRowIsolationProbe, RowIsolationProbe
from shared_kernel.audit import AuditDecision, AuditEvent
from shared_kernel.audit.events import utc_now
from shared_kernel.exceptions import (
    ConfigurationFaultError,
    ImmutableRecordError,
    ResourceNotFoundError,
)

_TENANT_CONNECTION_KEY = "shielded.tenant_connection"

_SET_SESSION_VARIABLES = text(
    "SELECT set_config('app.tenant_id', :tenant_id, true), "
    "set_config('app.user_id', :user_id, true)"
)
_CLEAR_SESSION_VARIABLES = text(
    "SELECT set_config('app.tenant_id', '', true), "
    "set_config('app.user_id', '', true)"
)


def _isolated(cls: type) -> bool:
    return isinstance(cls, type) and issubclass(cls, TenantIsolated)


def _entity_names(classes: list[type]) -> list[str]:
    return sorted(cls.__name__ for cls in classes)


def _operation(execute_state: ORMExecuteState) -> str:
    if execute_state.is_insert:
        return "insert"
    if execute_state.is_update:
        return "update"
    if execute_state.is_delete:
        return "delete"
    return "select"


class RowIsolationEnforcer:
    """Session event listeners implementing tenant row isolation."""

    def __init__(self, probe: RowIsolationProbe | None = None):
        self._probe = probe or DefaultRowIsolationProbe()

    def install(self) -> None:
        """Register the listeners on every Session (sync and async)."""
        for name, listener in self._listeners():
            if not event.contains(Session, name, listener):
                event.listen(Session, name, listener)

    def uninstall(self) -> None:
        """Remove the listeners."""
        for name, listener in self._listeners():
            if event.contains(Session, name, listener):
                event.remove(Session, name, listener)

    def _listeners(self) -> list[tuple[str, Any]]:
        return [
            ("do_orm_execute", self.scope_statement),
            ("before_flush", self.enforce_flush),
            ("after_begin", self.set_session_variables),
            ("before_commit", self.clear_session_variables),
            ("after_commit", self.promote_events),
            ("after_rollback", self.discard_events),
        ]

    def scope_statement(self, execute_state: ORMExecuteState) -> None:
        """Constrain an ORM statement to the bound tenant."""
        if not (
            execute_state.is_select
            or execute_state.is_update
            or execute_state.is_delete
            or execute_state.is_insert
        ):
            return

        session = execute_state.session
        involved = [
            mapper.class_
            for mapper in execute_state.all_mappers
            if _isolated(mapper.class_)
        ]

        if get_binding(session) is None:
            if involved:
                self._probe.context_missing(
                    operation=_operation(execute_state),
                    entities=_entity_names(involved),
                )
                raise ConfigurationFaultError(
                    "Tenant-isolated storage accessed without an AuthContext"
                )
            return

        context = require_context(session)
        tenant_id = context.tenant_id

        if execute_state.is_select:
            if execute_state.is_column_load or execute_state.is_relationship_load:
                # Criteria from the originating query propagate to these
                return
            options = [
                with_loader_criteria(
                    mapper.class_,
                    mapper.class_.tenant_column() == tenant_id,
                    include_aliases=True,
                )
                for mapper in Base.registry.mappers
                if _isolated(mapper.class_)
            ]
            execute_state.statement = execute_state.statement.options(*options)
        elif involved:
            operation = _operation(execute_state)
            for cls in involved:
                if cls.__append_only__ and operation != "insert":
                    self._probe.immutable_write_blocked(
                        entity=cls.__name__, operation=operation
                    )
                    raise ImmutableRecordError(
                        f"{cls.__name__} rows cannot be modified"
                    )
            self._probe.bulk_write_refused(
                entity=_entity_names(involved)[0], operation=operation
            )
            raise ConfigurationFaultError(
                f"Bulk {operation} statements on tenant-isolated tables "
                "are not allowed"
            )

        if involved:
            self._probe.statement_scoped(
                tenant_id=tenant_id, entities=_entity_names(involved)
            )

    def enforce_flush(
        self, session: Session, flush_context: Any, instances: Any
    ) -> None:
        """Assign, verify and audit tenant-isolated rows about to be flushed."""
        isolated_new = [obj for obj in session.new if isinstance(obj, TenantIsolated)]
        isolated_dirty = [
            obj
            for obj in session.dirty
            if isinstance(obj, TenantIsolated)
            and session.is_modified(obj, include_collections=False)
        ]
        isolated_deleted = [
            obj for obj in session.deleted if isinstance(obj, TenantIsolated)
        ]
        if not (isolated_new or isolated_dirty or isolated_deleted):
            return

        if get_binding(session) is None:
            touched = {type(obj) for obj in isolated_new + isolated_dirty}
            touched.update(type(obj) for obj in isolated_deleted)
            self._probe.context_missing(
                operation="flush", entities=_entity_names(list(touched))
            )
            raise ConfigurationFaultError(
                "Tenant-isolated rows flushed without an AuthContext"
            )

        context = require_context(session)
        tenant_id = context.tenant_id

        for obj in isolated_new:
            entity = type(obj).__name__
            if obj.__forbid_request_insert__:
                self._probe.insert_refused(entity=entity)
                raise ConfigurationFaultError(
                    f"{entity} rows cannot be created in a request"
                )
            supplied = obj.owning_tenant_id()
            if supplied is not None and supplied != tenant_id:
                self._probe.tenant_overridden(
                    entity=entity, supplied=supplied, bound=tenant_id
                )
            setattr(obj, obj.__tenant_attribute__, tenant_id)
            self._queue_event(session, obj, "create")

        for obj in isolated_dirty:
            self._verify_persisted_tenant(obj, tenant_id, operation="update")
            self._queue_event(session, obj, "update")

        for obj in isolated_deleted:
            self._verify_persisted_tenant(obj, tenant_id, operation="delete")
            self._queue_event(session, obj, "delete")

    def _verify_persisted_tenant(
        self, obj: TenantIsolated, tenant_id: str, operation: str
    ) -> None:
        entity = type(obj).__name__
        if obj.__append_only__:
            self._probe.immutable_write_blocked(entity=entity, operation=operation)
            raise ImmutableRecordError(f"{entity} rows cannot be modified")

        history = inspect(obj).attrs[obj.__tenant_attribute__].load_history()
        persisted = (list(history.deleted) or list(history.unchanged) or [None])[0]
        if persisted != tenant_id:
            self._probe.cross_tenant_write_blocked(
                entity=entity,
                resource_id=obj.audit_resource_id(),
                tenant_id=tenant_id,
            )
            raise ResourceNotFoundError()

        if history.added and history.added[0] != persisted:
            set_committed_value(obj, obj.__tenant_attribute__, persisted)
            self._probe.tenant_change_discarded(
                entity=entity, resource_id=obj.audit_resource_id()
            )

    def _queue_event(self, session: Session, obj: TenantIsolated, verb: str) -> None:
        prefix = obj.audit_action_prefix()
        if prefix is None:
            return
        binding = get_binding(session)
        assert binding is not None
        session.info.setdefault(PENDING_EVENTS_KEY, []).append(
            AuditEvent(
                tenant_id=binding.context.tenant_id,
                user_id=binding.context.user_id,
                action=f"{prefix}.{verb}",
                resource_type=obj.__audit_resource_type__ or prefix,
                resource_id=obj.audit_resource_id(),
                decision=AuditDecision.COMMITTED,
                timestamp=utc_now(),
                request_id=binding.request_id,
            )
        )

    def set_session_variables(
        self,
        session: Session,
        transaction: SessionTransaction,
        connection: Connection,
    ) -> None:
        """Publish the bound tenant to PostgreSQL row level security."""
        if connection.dialect.name != "postgresql" or get_binding(session) is None:
            return
        context = require_context(session)
        connection.execute(
            _SET_SESSION_VARIABLES,
            {"tenant_id": context.tenant_id, "user_id": context.user_id},
        )
        session.info[_TENANT_CONNECTION_KEY] = connection
        self._probe.session_variables_set(tenant_id=context.tenant_id)

    def clear_session_variables(self, session: Session) -> None:
        """Flush pending work, then clear the tenant settings before commit."""
        connection = session.info.get(_TENANT_CONNECTION_KEY)
        if connection is None:
            return
        session.flush()
        connection.execute(_CLEAR_SESSION_VARIABLES)
        session.info.pop(_TENANT_CONNECTION_KEY, None)
        self._probe.session_variables_cleared()

    def promote_events(self, session: Session) -> None:
        """Mark the mutation events of a committed transaction deliverable."""
        pending = session.info.pop(PENDING_EVENTS_KEY, [])
        if pending:
            session.info.setdefault(COMMITTED_EVENTS_KEY, []).extend(pending)

    def discard_events(self, session: Session) -> None:
        """Drop the mutation events of a rolled back transaction."""
        session.info.pop(PENDING_EVENTS_KEY, None)
        session.info.pop(_TENANT_CONNECTION_KEY, None)


_enforcer: RowIsolationEnforcer | None = None


def install_row_isolation(
    probe: RowIsolationProbe | None = None,
) -> RowIsolationEnforcer:
    """Install the row isolation listeners once per process.

    Returns:
        The installed enforcer
    """
    global _enforcer
    if _enforcer is None:
        _enforcer = RowIsolationEnforcer(probe=probe)
    _enforcer.install()
    return _enforcer
