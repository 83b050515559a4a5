"""Projects presentation package."""

from projects.presentation.routes import router

__all__ = ["router"]
