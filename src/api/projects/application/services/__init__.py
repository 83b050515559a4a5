"""Application services for the Projects bounded context."""

from projects.application.services.project_service import ProjectService

__all__ = ["ProjectService"]
