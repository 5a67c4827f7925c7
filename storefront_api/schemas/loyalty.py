"""Schemas for loyalty endpoints."""

from datetime import date, datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class LoyaltyAccountOut(BaseModel):
    id: str
    customer_id: str
    points_balance: int
    total_earned: int
    total_redeemed: int
    tier: str
    birthday: date | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TierConfigOut(BaseModel):
    tier: str
    name: str
    min_points: int
    discount_percent: int
    color: str
    benefits: list[str]


class TierInfo(BaseModel):
    current_tier: TierConfigOut
    next_tier: TierConfigOut | None = None
    points_to_next_tier: int
    progress_percent: float


class LoyaltyAccountResponse(BaseModel):
    account: LoyaltyAccountOut
    tier_info: TierInfo


class LoyaltyTransactionOut(BaseModel):
    id: str
    points: int
    type: str
    reason: str | None = None
    order_id: str | None = None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias=AliasChoices("metadata_", "metadata"))
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LoyaltyTransactionListResponse(BaseModel):
    transactions: list[LoyaltyTransactionOut]
    skip: int
    take: int
