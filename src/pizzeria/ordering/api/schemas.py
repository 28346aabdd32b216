"""Pydantic request schemas for the orders API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from pizzeria.catalog.api.schemas import CustomizationSelection


class OrderItemRequest(BaseModel):
    pizza_id: str
    size: str
    quantity: int = Field(1, ge=1, le=10)
    customizations: CustomizationSelection | None = None


class DeliveryAddressRequest(BaseModel):
    street: str = Field(..., max_length=200)
    city: str = Field(..., max_length=100)
    state: str = Field(..., max_length=100)
    zip_code: str = Field(..., max_length=6)
    landmark: str | None = Field(None, max_length=100)
    instructions: str | None = Field(None, max_length=200)


class CreateOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [
                        {
                            "pizza_id": "8f9c1d3e-0000-4000-8000-000000000000",
                            "size": "medium",
                            "quantity": 2,
                            "customizations": {"base": "Thin Crust", "cheese": ["Cheddar"]},
                        }
                    ],
                    "delivery_address": {
                        "street": "12 MG Road",
                        "city": "Bengaluru",
                        "state": "KA",
                        "zip_code": "560001",
                    },
                    "contact_phone": "9876543210",
                    "payment_method": "razorpay",
                }
            ]
        }
    }

    items: list[OrderItemRequest] = Field(..., min_length=1)
    delivery_address: DeliveryAddressRequest
    contact_phone: str = Field(..., max_length=10)
    payment_method: str = "razorpay"
    order_notes: str | None = Field(None, max_length=500)


class VerifyPaymentRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "order_id": "PZ123456789",
                    "razorpay_order_id": "order_Nx1",
                    "razorpay_payment_id": "pay_Nx1",
                    "razorpay_signature": "9f86d081884c7d65...",
                }
            ]
        }
    }

    order_id: str
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class ConfirmCodRequest(BaseModel):
    order_id: str


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class RateOrderRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    review: str | None = Field(None, max_length=500)
