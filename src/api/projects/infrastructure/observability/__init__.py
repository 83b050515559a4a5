"""Domain-Oriented Observability for Projects infrastructure."""

from projects.infrastructure.observability.repository_probe import (
    DefaultProjectRepositoryProbe,
    ProjectRepositoryProbe,
)

__all__ = [
    "DefaultProjectRepositoryProbe",
    "ProjectRepositoryProbe",
]
