"""Tenant presentation package."""

from iam.presentation.tenants.routes import router

__all__ = ["router"]
