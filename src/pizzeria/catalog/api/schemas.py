"""Pydantic request schemas for the pizza API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SizeSchema(BaseModel):
    size: str
    price_multiplier: float = Field(..., gt=0)


class NutritionSchema(BaseModel):
    calories: int | None = Field(None, ge=0)
    protein: int | None = Field(None, ge=0)
    carbs: int | None = Field(None, ge=0)
    fat: int | None = Field(None, ge=0)
    fiber: int | None = Field(None, ge=0)


class CustomizationSelection(BaseModel):
    base: str | None = None
    sauce: str | None = None
    cheese: list[str] = Field(default_factory=list)
    vegetables: list[str] = Field(default_factory=list)
    meats: list[str] = Field(default_factory=list)


class AddPizzaRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Margherita",
                    "description": "Tomato, mozzarella and basil",
                    "category": "vegetarian",
                    "base_price": 250,
                    "preparation_time": 15,
                    "ingredients": ["Tomato Sauce", "Mozzarella", "Basil"],
                }
            ]
        }
    }

    name: str = Field(..., max_length=100)
    description: str = Field(..., max_length=500)
    category: str
    base_price: float = Field(..., ge=0)
    sizes: list[SizeSchema] | None = None
    image: str | None = Field(None, max_length=255)
    is_customizable: bool = True
    preparation_time: int = Field(15, ge=10)
    ingredients: list[str] = Field(default_factory=list)
    nutritional_info: NutritionSchema | None = None


class UpdatePizzaRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"base_price": 275, "is_available": True}]}}

    name: str | None = Field(None, max_length=100)
    description: str | None = Field(None, max_length=500)
    category: str | None = None
    base_price: float | None = Field(None, ge=0)
    sizes: list[SizeSchema] | None = None
    image: str | None = Field(None, max_length=255)
    is_available: bool | None = None
    is_customizable: bool | None = None
    preparation_time: int | None = Field(None, ge=10)
    ingredients: list[str] | None = None
    nutritional_info: NutritionSchema | None = None


class CalculatePriceRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "pizza_id": "8f9c1d3e-0000-4000-8000-000000000000",
                    "size": "large",
                    "quantity": 2,
                    "customizations": {"base": "Thin Crust", "cheese": ["Cheddar"], "vegetables": ["Olives"]},
                }
            ]
        }
    }

    pizza_id: str
    size: str
    quantity: int = Field(1, ge=1, le=10)
    customizations: CustomizationSelection | None = None


class CustomizationOptionRequest(BaseModel):
    group: str
    name: str = Field(..., max_length=100)
    price: float | None = Field(None, ge=0)
    is_available: bool | None = None
    inventory_item: str | None = Field(None, max_length=100)


class UpdateCustomizationRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [{"options": [{"group": "meat", "name": "Pepperoni", "price": 90, "is_available": True}]}]
        }
    }

    options: list[CustomizationOptionRequest] = Field(..., min_length=1)
