"""Schemas for endpoints composed from platform calls (checkout, search, pricing)."""

from typing import Any

from pydantic import BaseModel, Field


class Address(BaseModel):
    first_name: str
    last_name: str
    address_1: str
    address_2: str | None = None
    city: str
    province: str | None = None
    postal_code: str | None = None
    country_code: str
    phone: str


class FastCheckoutRequest(BaseModel):
    email: str = Field(min_length=3)
    shipping_address: Address
    billing_address: Address | None = None
    shipping_option_id: str = Field(min_length=1)


class CartResponse(BaseModel):
    cart: dict[str, Any]


class FeaturedProduct(BaseModel):
    id: str | None = None
    title: str | None = None
    handle: str | None = None
    thumbnail: str | None = None
    min_price: float | None = None
    collection_title: str | None = None


class PopularSearchResponse(BaseModel):
    terms: list[str]
    featured: list[FeaturedProduct]


class PriceOut(BaseModel):
    id: str | None = None
    amount: float | None = None
    currency_code: str | None = None


class VariantProduct(BaseModel):
    id: str | None = None
    title: str | None = None
    thumbnail: str | None = None


class VariantPricing(BaseModel):
    id: str | None = None
    title: str
    sku: str | None = None
    product: VariantProduct
    prices: list[PriceOut]


class PricingListResponse(BaseModel):
    variants: list[VariantPricing]


class UpdatePriceRequest(BaseModel):
    amount: float = Field(gt=0)
    currency_code: str = Field(default="mnt", min_length=3, max_length=3)


class UpdatedPrice(BaseModel):
    amount: float
    currency_code: str


class UpdatePriceResponse(BaseModel):
    success: bool
    variant_id: str
    updated_price: UpdatedPrice


class VariantImagesRequest(BaseModel):
    image_ids: list[str] = Field(default_factory=list)
    thumbnail_id: str | None = None


class VariantImagesResponse(BaseModel):
    success: bool
    variant: dict[str, Any] | None = None


class EventRequest(BaseModel):
    name: str = Field(min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)


class EventResponse(BaseModel):
    handled: int
