"""Storefront endpoints composed from platform calls: fast checkout and search."""

from fastapi import APIRouter, Depends

from storefront_api.schemas.commerce import CartResponse, FastCheckoutRequest, PopularSearchResponse
from storefront_api.services.checkout import fast_checkout
from storefront_api.services.commerce_client import CommerceError
from storefront_api.services.errors import ValidationFailedError
from storefront_api.services.rate_limit import search_limit
from storefront_api.services.search import popular_searches

router = APIRouter()


@router.post("/carts/{cart_id}/fast-checkout", response_model=CartResponse)
async def post_fast_checkout(cart_id: str, body: FastCheckoutRequest) -> CartResponse:
    """Set email, addresses and shipping method in one round trip."""
    try:
        result = await fast_checkout(
            cart_id,
            email=body.email,
            shipping_address=body.shipping_address.model_dump(exclude_none=True),
            billing_address=body.billing_address.model_dump(exclude_none=True) if body.billing_address else None,
            shipping_option_id=body.shipping_option_id,
        )
    except CommerceError as e:
        raise ValidationFailedError(e.message or "Checkout preparation failed") from e
    return CartResponse(**result)


@router.get("/search/popular", response_model=PopularSearchResponse, dependencies=[Depends(search_limit)])
async def get_popular_searches() -> PopularSearchResponse:
    return PopularSearchResponse(**await popular_searches())
