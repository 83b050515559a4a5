"""SQLAlchemy declarative base and shared model utilities.

This module provides the declarative base class for all SQLAlchemy ORM models,
common mixins for timestamps, and the tenant isolation markers consumed by
the row isolation session events.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, ClassVar

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column
from sqlalchemy.orm.attributes import InstrumentedAttribute


def _utc_now() -> datetime:
    """Generate UTC timestamp for database defaults.

    Uses a named function instead of lambda for SQLAlchemy 2.0 compatibility.
    Ensures proper INSERT-time evaluation.
    """
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models.

    All models in the application should inherit from this base class.
    It provides the declarative base functionality and type hints for SQLAlchemy 2.0.
    """

    # Type annotation for SQLAlchemy
    type_annotation_map: dict[type, Any] = {}


class TimestampMixin:
    """Mixin providing created_at and updated_at timestamp columns.

    Automatically sets created_at on insert and updates updated_at on modification.
    Uses timezone-aware UTC timestamps with Python-side default generation.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=_utc_now,  # Evaluated at INSERT time
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=_utc_now,  # Evaluated at INSERT time
        onupdate=_utc_now,  # Evaluated at UPDATE time
        nullable=False,
    )


class TenantIsolated:
    """Marker for models whose every row belongs to exactly one tenant.

    The row isolation session events scope every ORM statement touching a
    subclass to the bound AuthContext's tenant.

    Class attributes:
        __tenant_attribute__: Mapped attribute holding the owning tenant id
        __forbid_request_insert__: Rows are created only by administrative
            paths, never through a request-scoped session
        __append_only__: Rows may be inserted but never updated or deleted
        __audit_resource_type__: When set, every insert, update and delete
            of a row emits one mutation audit event for this resource type
        __audit_action__: Prefix of the audited action names; defaults to
            the audit resource type
    """

    __tenant_attribute__: ClassVar[str] = "tenant_id"
    __forbid_request_insert__: ClassVar[bool] = False
    __append_only__: ClassVar[bool] = False
    __audit_resource_type__: ClassVar[str | None] = None
    __audit_action__: ClassVar[str | None] = None

    @classmethod
    def tenant_column(cls) -> InstrumentedAttribute[str]:
        """Get the mapped attribute holding the owning tenant id."""
        return getattr(cls, cls.__tenant_attribute__)

    @classmethod
    def audit_action_prefix(cls) -> str | None:
        """Prefix for mutation audit actions, or None if not audited."""
        return cls.__audit_action__ or cls.__audit_resource_type__

    def owning_tenant_id(self) -> str | None:
        """Get the tenant id currently set on this instance."""
        return getattr(self, self.__tenant_attribute__)

    def audit_resource_id(self) -> str:
        """Identifier written to mutation audit events for this row."""
        return str(getattr(self, "id"))


class TenantScopedMixin(TenantIsolated):
    """Mixin adding a non-null ``tenant_id`` foreign key to tenants.

    Foreign Key Constraint:
    - tenant_id references tenants.id with RESTRICT delete
    - A tenant cannot be removed while it still owns rows
    """

    @declared_attr
    def tenant_id(cls) -> Mapped[str]:
        return mapped_column(
            String(26),
            ForeignKey("tenants.id", ondelete="RESTRICT"),
            nullable=False,
            index=True,
        )
