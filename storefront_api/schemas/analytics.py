"""Schemas for product analytics endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TrackViewRequest(BaseModel):
    product_id: str = ""
    session_id: str | None = None


class TrackViewResponse(BaseModel):
    success: bool
    current_viewers: int


class Rating(BaseModel):
    average: float
    count: int


class ProductStats(BaseModel):
    product_id: str
    current_viewers: int
    recent_sales_24h: int
    rating: Rating


class ReviewOut(BaseModel):
    id: str
    product_id: str
    customer_id: str
    customer_name: str
    rating: int
    title: str | None = None
    comment: str
    photos: list[str] | None = None
    verified_purchase: bool
    is_approved: bool
    helpful_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CreateReviewRequest(BaseModel):
    # Range is checked by the service so the client gets the domain message
    rating: int
    comment: str = Field(min_length=1)
    title: str | None = None
    photos: list[str] | None = None


class ReviewListResponse(BaseModel):
    reviews: list[ReviewOut]
    rating: Rating
    limit: int
    offset: int


class ReviewResponse(BaseModel):
    review: ReviewOut
    message: str | None = None


class AdminReviewListResponse(BaseModel):
    reviews: list[ReviewOut]
    count: int
    limit: int
    offset: int
