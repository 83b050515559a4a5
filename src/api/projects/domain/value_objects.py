"""Value objects for the Projects domain."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from ulid import ULID


@dataclass(frozen=True)
class ProjectId:
    """Identifier for a Project aggregate.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> ProjectId:
        """Generate a new ProjectId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> ProjectId:
        """Create ProjectId from string value.

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            canonical = str(ULID.from_str(value))
        except ValueError as e:
            raise ValueError(f"Invalid ProjectId: {value}") from e

        return cls(value=canonical)


class ProjectStatus(StrEnum):
    """Lifecycle state of a project."""

    ACTIVE = "active"
    ARCHIVED = "archived"
