"""Schemas for the signed-in customer's profile and order history."""

from typing import Any

from pydantic import BaseModel, Field


class ProfileUpdate(BaseModel):
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=32)


class CustomerResponse(BaseModel):
    customer: dict[str, Any]


class OrderHistoryResponse(BaseModel):
    orders: list[dict[str, Any]]
    count: int
    offset: int
    limit: int
