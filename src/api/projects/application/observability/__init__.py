"""Domain-Oriented Observability for the Projects application layer."""

from projects.application.observability.project_service_probe import (
    DefaultProjectServiceProbe,
    ProjectServiceProbe,
)

__all__ = [
    "DefaultProjectServiceProbe",
    "ProjectServiceProbe",
]
