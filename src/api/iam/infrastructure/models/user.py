"""SQLAlchemy ORM model for the users table.

Stores user metadata. Users are provisioned from the identity provider
and belong to exactly one tenant.
"""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TenantScopedMixin, TimestampMixin


class UserModel(Base, TimestampMixin, TenantScopedMixin):
    """ORM model for users table.

    Note: id is VARCHAR(255) to accommodate external SSO IDs (UUIDs, Auth0, etc.)
    Emails are unique per tenant, not globally.
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("tenant_id", "email", name="uq_users_tenant_email"),
    )
    __audit_resource_type__ = "user"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(50), nullable=False, default="member")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserModel(id={self.id}, tenant_id={self.tenant_id})>"
