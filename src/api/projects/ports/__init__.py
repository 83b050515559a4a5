"""Ports (interfaces) for the Projects bounded context."""

from projects.ports.repositories import IProjectRepository

__all__ = ["IProjectRepository"]
