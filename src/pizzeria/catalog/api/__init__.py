"""Catalog API package."""

from pizzeria.catalog.api.routes import router

__all__ = ["router"]
