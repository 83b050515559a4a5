"""Project aggregate."""

from __future__ import annotations

from dataclasses import dataclass, field

from projects.domain.value_objects import ProjectId, ProjectStatus

MAX_NAME_LENGTH = 255


def _validate_name(name: str) -> None:
    if not name or not name.strip():
        raise ValueError("Project name cannot be empty")
    if len(name) > MAX_NAME_LENGTH:
        raise ValueError(
            f"Project name cannot exceed {MAX_NAME_LENGTH} characters"
        )


@dataclass
class Project:
    """A tenant-owned unit of work that users create and get assigned to.

    Business rules:
    - tenant_id is set once, from the creating user's credential, and
      never changes
    - The creator owns the project
    - A user is assigned at most once
    - Archived projects are kept, not deleted

    Non-admin roles only reach projects they own or are assigned to; the
    aggregate answers those questions for the authorization engine.
    """

    id: ProjectId
    tenant_id: str
    owner_id: str | None
    name: str
    description: str | None = None
    status: ProjectStatus = ProjectStatus.ACTIVE
    assignee_ids: set[str] = field(default_factory=set)

    @classmethod
    def create(
        cls,
        tenant_id: str,
        owner_id: str,
        name: str,
        description: str | None = None,
    ) -> Project:
        """Factory method for creating a new project.

        Args:
            tenant_id: Tenant of the creating user's credential
            owner_id: The creating user
            name: Project name
            description: Optional free-form description

        Returns:
            A new, active Project with no assignees

        Raises:
            ValueError: If the name is empty or too long
        """
        _validate_name(name)
        return cls(
            id=ProjectId.generate(),
            tenant_id=tenant_id,
            owner_id=owner_id,
            name=name,
            description=description,
        )

    def update(
        self,
        name: str | None = None,
        description: str | None = None,
        status: ProjectStatus | None = None,
    ) -> None:
        """Change the given attributes; None leaves an attribute unchanged.

        Raises:
            ValueError: If the new name is empty or too long
        """
        if name is not None:
            _validate_name(name)
            self.name = name
        if description is not None:
            self.description = description
        if status is not None:
            self.status = status

    def assign(self, user_id: str) -> bool:
        """Assign a user to the project.

        Returns:
            False if the user was already assigned
        """
        if user_id in self.assignee_ids:
            return False
        self.assignee_ids.add(user_id)
        return True

    def unassign(self, user_id: str) -> bool:
        """Remove a user's assignment.

        Returns:
            False if the user was not assigned
        """
        if user_id not in self.assignee_ids:
            return False
        self.assignee_ids.discard(user_id)
        return True

    @property
    def is_archived(self) -> bool:
        """Whether the project has been archived."""
        return self.status is ProjectStatus.ARCHIVED

    def belongs_to_tenant(self, tenant_id: str) -> bool:
        """Whether the project lives in the given tenant."""
        return self.tenant_id == tenant_id

    def is_owned_by(self, user_id: str) -> bool:
        """Whether the user created the project."""
        return self.owner_id is not None and self.owner_id == user_id

    def is_assigned_to(self, user_id: str) -> bool:
        """Whether the user has been assigned to the project."""
        return user_id in self.assignee_ids
