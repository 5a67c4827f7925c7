"""Pydantic schemas for API request/response validation."""

from storefront_api.schemas.common import ErrorDetail, ErrorResponse
from storefront_api.schemas.analytics import ProductStats, ReviewOut
from storefront_api.schemas.banner import BannerCreate, BannerOut, BannerUpdate
from storefront_api.schemas.loyalty import LoyaltyAccountResponse, TierInfo
from storefront_api.schemas.trade_in import EstimateRequest, EstimateResponse

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "BannerCreate",
    "BannerOut",
    "BannerUpdate",
    "EstimateRequest",
    "EstimateResponse",
    "LoyaltyAccountResponse",
    "ProductStats",
    "ReviewOut",
    "TierInfo",
]
