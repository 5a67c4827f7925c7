"""Profile and order history for the signed-in customer."""

from fastapi import APIRouter, Depends, Query

from storefront_api.schemas.customer import CustomerResponse, OrderHistoryResponse, ProfileUpdate
from storefront_api.services.auth import require_customer
from storefront_api.services.customers import get_profile, list_orders, update_profile

router = APIRouter()


@router.get("/custom/me", response_model=CustomerResponse)
async def get_me(customer_id: str = Depends(require_customer)) -> CustomerResponse:
    return CustomerResponse(customer=await get_profile(customer_id))


@router.post("/custom/me", response_model=CustomerResponse)
async def post_me(body: ProfileUpdate, customer_id: str = Depends(require_customer)) -> CustomerResponse:
    customer = await update_profile(customer_id, body.model_dump(exclude_unset=True))
    return CustomerResponse(customer=customer)


@router.get("/custom/orders", response_model=OrderHistoryResponse)
async def get_orders(
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    customer_id: str = Depends(require_customer),
) -> OrderHistoryResponse:
    """Newest orders first, with derived payment and fulfillment status."""
    return OrderHistoryResponse(**await list_orders(customer_id, limit=limit, offset=offset))
