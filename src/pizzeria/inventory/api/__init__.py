"""Inventory API package."""

from pizzeria.inventory.api.routes import router

__all__ = ["router"]
