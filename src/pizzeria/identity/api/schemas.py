"""Pydantic request schemas for the auth API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AddressSchema(BaseModel):
    street: str = Field(..., max_length=200)
    city: str = Field(..., max_length=100)
    state: str = Field(..., max_length=100)
    zip_code: str = Field(..., max_length=10)


class RegisterRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Asha Rao",
                    "email": "asha@example.com",
                    "password": "s3cret!",
                    "phone": "9876543210",
                    "address": {"street": "12 MG Road", "city": "Bengaluru", "state": "KA", "zip_code": "560001"},
                }
            ]
        }
    }

    name: str = Field(..., min_length=2, max_length=50)
    email: str = Field(..., max_length=254)
    password: str = Field(..., min_length=6, max_length=128)
    phone: str | None = Field(None, max_length=10)
    address: AddressSchema | None = None


class LoginRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"email": "asha@example.com", "password": "s3cret!"}]}}

    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=128)


class UpdateProfileRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"name": "Asha R.", "phone": "9876500000"}]}}

    name: str | None = Field(None, min_length=2, max_length=50)
    phone: str | None = Field(None, max_length=10)
    address: AddressSchema | None = None


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., max_length=254)


class ResetPasswordRequest(BaseModel):
    password: str = Field(..., min_length=6, max_length=128)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., max_length=128)
    new_password: str = Field(..., min_length=6, max_length=128)
