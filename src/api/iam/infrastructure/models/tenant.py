"""SQLAlchemy ORM model for the tenants table.

Stores tenant metadata. Tenants represent organizations and are the
top-level isolation boundary in the system.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TenantIsolated, TimestampMixin


class TenantModel(Base, TimestampMixin, TenantIsolated):
    """ORM model for tenants table.

    A request only ever sees its own tenant row: the row's own id is its
    tenant column. Rows are inserted administratively, never through a
    request-scoped session.

    Note: Tenant slugs are globally unique across the entire system.
    """

    __tablename__ = "tenants"
    __tenant_attribute__ = "id"
    __forbid_request_insert__ = True
    __audit_resource_type__ = "tenant"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True, index=True
    )
    plan: Mapped[str] = mapped_column(String(50), nullable=False, default="free")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<TenantModel(id={self.id}, slug={self.slug})>"
