"""SQLAlchemy ORM models for the projects and project_assignments tables."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from infrastructure.database.models import Base, TenantScopedMixin, TimestampMixin


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProjectModel(Base, TimestampMixin, TenantScopedMixin):
    """ORM model for projects table.

    Note: owner_id is set to NULL when the owning user is removed; the
    project then only stays reachable for assignees and tenant admins.
    """

    __tablename__ = "projects"
    __audit_resource_type__ = "project"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    owner_id: Mapped[str | None] = mapped_column(
        String(255),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="active")

    assignments: Mapped[list[ProjectAssignmentModel]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<ProjectModel(id={self.id}, tenant_id={self.tenant_id})>"


class ProjectAssignmentModel(Base, TenantScopedMixin):
    """ORM model for project_assignments table.

    Composite primary key (project_id, user_id) keeps one assignment per
    user and project. Assignment changes are audited against the project.
    """

    __tablename__ = "project_assignments"
    __audit_resource_type__ = "project"
    __audit_action__ = "project.assignee"

    project_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("projects.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=_utc_now,
        nullable=False,
    )

    project: Mapped[ProjectModel] = relationship(back_populates="assignments")

    def audit_resource_id(self) -> str:
        """Assignment events are recorded against the project."""
        return self.project_id

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<ProjectAssignmentModel(project_id={self.project_id}, "
            f"user_id={self.user_id})>"
        )
