"""Identity API package."""

from pizzeria.identity.api.routes import router

__all__ = ["router"]
