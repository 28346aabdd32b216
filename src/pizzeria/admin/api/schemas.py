"""Pydantic request schemas for the admin API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class UpdateOrderStatusRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "preparing", "notes": "Oven 2"}]}}

    status: str
    notes: str | None = Field(None, max_length=500)
