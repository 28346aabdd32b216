"""Ordering API package."""

from pizzeria.ordering.api.routes import router

__all__ = ["router"]
