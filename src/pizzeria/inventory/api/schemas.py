"""Pydantic request schemas for the inventory API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SupplierSchema(BaseModel):
    name: str | None = Field(None, max_length=100)
    contact: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=254)


class AddItemRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Mozzarella",
                    "category": "cheese",
                    "unit": "kg",
                    "current_stock": 40,
                    "min_stock_level": 10,
                    "max_stock_level": 100,
                    "price_per_unit": 420,
                    "supplier": {"name": "Dairy Fresh", "contact": "9876543210"},
                }
            ]
        }
    }

    name: str = Field(..., max_length=100)
    category: str
    unit: str
    current_stock: float = Field(0.0, ge=0)
    min_stock_level: float = Field(10.0, ge=0)
    max_stock_level: float = Field(100.0, ge=0)
    price_per_unit: float = Field(0.0, ge=0)
    supplier: SupplierSchema | None = None
    expiry_date: datetime | None = None


class UpdateItemRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"min_stock_level": 15, "price_per_unit": 450}]}}

    name: str | None = Field(None, max_length=100)
    category: str | None = None
    unit: str | None = None
    min_stock_level: float | None = Field(None, ge=0)
    max_stock_level: float | None = Field(None, ge=0)
    price_per_unit: float | None = Field(None, ge=0)
    supplier: SupplierSchema | None = None
    expiry_date: datetime | None = None


class StockAdjustmentRequest(BaseModel):
    model_config = {
        "json_schema_extra": {"examples": [{"action": "restock", "quantity": 25, "reason": "Weekly delivery"}]}
    }

    action: str
    quantity: float = Field(..., ge=0)
    reason: str | None = Field(None, max_length=200)


class BulkStockUpdate(StockAdjustmentRequest):
    item_id: str


class BulkStockUpdateRequest(BaseModel):
    updates: list[BulkStockUpdate] = Field(..., min_length=1)
