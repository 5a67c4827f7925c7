"""Admin endpoints for pricing and variant images.

All routes require the X-Admin-Token header.
"""

from fastapi import APIRouter, Depends

from storefront_api.schemas.commerce import (
    PricingListResponse,
    UpdatePriceRequest,
    UpdatePriceResponse,
    VariantImagesRequest,
    VariantImagesResponse,
)
from storefront_api.services.auth import require_admin
from storefront_api.services.pricing import list_variant_prices, set_variant_images, update_variant_price

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/pricing", response_model=PricingListResponse)
async def get_pricing() -> PricingListResponse:
    """Every product variant with its current prices."""
    return PricingListResponse(variants=await list_variant_prices())


@router.post("/pricing/variants/{variant_id}", response_model=UpdatePriceResponse)
async def post_variant_price(variant_id: str, body: UpdatePriceRequest) -> UpdatePriceResponse:
    result = await update_variant_price(variant_id, body.amount, body.currency_code)
    return UpdatePriceResponse(**result)


@router.post("/products/variants/{variant_id}/images", response_model=VariantImagesResponse)
async def post_variant_images(variant_id: str, body: VariantImagesRequest) -> VariantImagesResponse:
    result = await set_variant_images(variant_id, body.image_ids, body.thumbnail_id)
    return VariantImagesResponse(**result)
