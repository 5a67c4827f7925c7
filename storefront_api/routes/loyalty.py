"""Loyalty endpoints for the signed-in customer."""

from fastapi import APIRouter, Depends, Query

from storefront_api.schemas.loyalty import (
    LoyaltyAccountOut,
    LoyaltyAccountResponse,
    LoyaltyTransactionListResponse,
    LoyaltyTransactionOut,
    TierInfo,
)
from storefront_api.services.auth import require_customer
from storefront_api.services.loyalty import get_account_transactions, get_or_create_account, get_tier_info
from storefront_api.stores.postgres import get_session

router = APIRouter()


@router.get("/loyalty/account", response_model=LoyaltyAccountResponse)
async def get_loyalty_account(customer_id: str = Depends(require_customer)) -> LoyaltyAccountResponse:
    """Points balance with current tier and progress to the next one."""
    async with get_session() as session:
        account = await get_or_create_account(session, customer_id)
        return LoyaltyAccountResponse(
            account=LoyaltyAccountOut.model_validate(account),
            tier_info=TierInfo(**get_tier_info(account)),
        )


@router.get("/loyalty/transactions", response_model=LoyaltyTransactionListResponse)
async def get_loyalty_transactions(
    skip: int = Query(default=0, ge=0),
    take: int = Query(default=50, ge=1, le=200),
    customer_id: str = Depends(require_customer),
) -> LoyaltyTransactionListResponse:
    async with get_session() as session:
        transactions = await get_account_transactions(session, customer_id, skip=skip, take=take)
        return LoyaltyTransactionListResponse(
            transactions=[LoyaltyTransactionOut.model_validate(t) for t in transactions],
            skip=skip,
            take=take,
        )
