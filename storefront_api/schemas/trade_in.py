"""Schemas for trade-in endpoints."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class EstimateRequest(BaseModel):
    new_product_id: str = Field(min_length=1)
    old_device_condition: str = Field(min_length=1)
    serial_number: str = Field(min_length=1)
    old_device_model: str | None = None
    device_checks: dict[str, bool] | None = None


class EstimateResponse(BaseModel):
    estimated_amount: float
    currency_code: str
    matched: bool
    reason: str | None = None
    failed_checks: list[str] | None = None


class ApplyRequest(EstimateRequest):
    cart_id: str = Field(min_length=1)


class RemoveRequest(BaseModel):
    cart_id: str = Field(min_length=1)


class TradeInLeadRequest(BaseModel):
    """Lead form body. Required fields are checked by the service."""

    customer_name: str | None = None
    phone: str | None = None
    old_device_model: str | None = None
    old_device_condition: str | None = None
    note: str | None = None
    new_product_id: str | None = None
    new_product_handle: str | None = None
    new_product_title: str | None = None


class TradeInRequestOut(BaseModel):
    id: str
    new_product_id: str | None = None
    new_product_handle: str | None = None
    new_product_title: str | None = None
    cart_id: str | None = None
    order_id: str | None = None
    estimated_amount: float | None = None
    currency_code: str
    promotion_code: str | None = None
    customer_name: str | None = None
    phone: str | None = None
    serial_number: str | None = None
    old_device_model: str
    old_device_condition: str
    note: str | None = None
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TradeInLeadResponse(BaseModel):
    trade_in_request: TradeInRequestOut


class TradeInOfferOut(BaseModel):
    id: str
    brand: str
    device_type: str | None = None
    model_keyword: str
    condition: str
    amount: float
    currency_code: str
    active: bool
    priority: int
    metadata: dict[str, Any] | None = Field(default=None, validation_alias=AliasChoices("metadata_", "metadata"))
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TradeInOfferCreate(BaseModel):
    model_keyword: str | None = None
    condition: str | None = None
    # Any JSON value; the service requires a number
    amount: Any = None
    brand: str | None = None
    device_type: str | None = None
    currency_code: str | None = None
    active: bool = True
    priority: int = 0
    metadata: dict[str, Any] | None = None


class TradeInOfferListResponse(BaseModel):
    trade_in_offers: list[TradeInOfferOut]


class TradeInOfferResponse(BaseModel):
    trade_in_offer: TradeInOfferOut


class DeviceMapOut(BaseModel):
    id: str
    tac_prefix: str
    brand: str
    device_type: str | None = None
    model_keyword: str
    priority: int
    active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DeviceMapCreate(BaseModel):
    tac_prefix: str = Field(min_length=8)
    model_keyword: str = Field(min_length=1)
    brand: str | None = None
    device_type: str | None = None
    priority: int = 0
    active: bool = True
    metadata: dict[str, Any] | None = None


class DeviceMapListResponse(BaseModel):
    device_map: list[DeviceMapOut]


class DeviceMapResponse(BaseModel):
    device_map: DeviceMapOut
