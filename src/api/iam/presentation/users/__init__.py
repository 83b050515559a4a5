"""User presentation package."""

from iam.presentation.users.routes import router

__all__ = ["router"]
