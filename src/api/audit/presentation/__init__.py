"""Audit presentation package."""

from audit.presentation.routes import router

__all__ = ["router"]
