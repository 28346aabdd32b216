"""Admin API package."""

from pizzeria.admin.api.routes import router

__all__ = ["router"]
