"""Domain aggregates for the Projects context."""

from projects.domain.aggregates.project import Project

__all__ = ["Project"]
