"""Application layer for the Projects bounded context."""

from projects.application.services import ProjectService

__all__ = ["ProjectService"]
