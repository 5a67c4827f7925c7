"""Trade-in endpoints.

Store:
- POST /store/trade-in/estimate: price an old device
- POST /store/trade-in/apply: turn the estimate into a cart discount
- POST /store/trade-in/remove: drop the discount
- POST /store/trade-in-requests: lead form

Admin: pricing matrix and TAC device map.
"""

from fastapi import APIRouter, Depends

from storefront_api.schemas.trade_in import (
    ApplyRequest,
    DeviceMapCreate,
    DeviceMapListResponse,
    DeviceMapOut,
    DeviceMapResponse,
    EstimateRequest,
    EstimateResponse,
    RemoveRequest,
    TradeInLeadRequest,
    TradeInLeadResponse,
    TradeInOfferCreate,
    TradeInOfferListResponse,
    TradeInOfferOut,
    TradeInOfferResponse,
    TradeInRequestOut,
)
from storefront_api.services import trade_in
from storefront_api.services.auth import require_admin
from storefront_api.services.rate_limit import moderate_limit, strict_limit
from storefront_api.stores.postgres import get_session

store_router = APIRouter()
admin_router = APIRouter(dependencies=[Depends(require_admin)])


@store_router.post("/trade-in/estimate", response_model=EstimateResponse, response_model_exclude_none=True)
async def post_estimate(body: EstimateRequest) -> EstimateResponse:
    async with get_session() as session:
        result = await trade_in.estimate(
            session,
            new_product_id=body.new_product_id,
            old_device_condition=body.old_device_condition,
            serial_number=body.serial_number,
            old_device_model=body.old_device_model,
            device_checks=body.device_checks,
        )
    return EstimateResponse(**result)


@store_router.post("/trade-in/apply", dependencies=[Depends(moderate_limit)])
async def post_apply(body: ApplyRequest) -> dict:
    """Apply a trade-in discount to the cart.

    Returns ``applied: false`` with a reason when the device cannot be priced.
    """
    async with get_session() as session:
        return await trade_in.apply(
            session,
            cart_id=body.cart_id,
            new_product_id=body.new_product_id,
            old_device_condition=body.old_device_condition,
            serial_number=body.serial_number,
            old_device_model=body.old_device_model,
            device_checks=body.device_checks,
        )


@store_router.post("/trade-in/remove")
async def post_remove(body: RemoveRequest) -> dict:
    async with get_session() as session:
        return await trade_in.remove(session, body.cart_id)


@store_router.post(
    "/trade-in-requests",
    response_model=TradeInLeadResponse,
    dependencies=[Depends(strict_limit)],
)
async def post_trade_in_request(body: TradeInLeadRequest) -> TradeInLeadResponse:
    async with get_session() as session:
        request = await trade_in.create_request(session, **body.model_dump())
        return TradeInLeadResponse(trade_in_request=TradeInRequestOut.model_validate(request))


@admin_router.get("/trade-in-offers", response_model=TradeInOfferListResponse)
async def get_offers() -> TradeInOfferListResponse:
    async with get_session() as session:
        offers = await trade_in.list_offers(session)
        return TradeInOfferListResponse(trade_in_offers=[TradeInOfferOut.model_validate(o) for o in offers])


@admin_router.post("/trade-in-offers", response_model=TradeInOfferResponse, status_code=201)
async def post_offer(body: TradeInOfferCreate) -> TradeInOfferResponse:
    async with get_session() as session:
        offer = await trade_in.create_offer(session, body.model_dump())
        return TradeInOfferResponse(trade_in_offer=TradeInOfferOut.model_validate(offer))


@admin_router.delete("/trade-in-offers/{offer_id}")
async def delete_offer(offer_id: str) -> dict:
    async with get_session() as session:
        await trade_in.delete_offer(session, offer_id)
    return {"id": offer_id, "deleted": True}


@admin_router.get("/trade-in-device-map", response_model=DeviceMapListResponse)
async def get_device_map(tac_prefix: str | None = None) -> DeviceMapListResponse:
    async with get_session() as session:
        rows = await trade_in.list_device_map(session, tac_prefix=tac_prefix)
        return DeviceMapListResponse(device_map=[DeviceMapOut.model_validate(r) for r in rows])


@admin_router.post("/trade-in-device-map", response_model=DeviceMapResponse, status_code=201)
async def post_device_map(body: DeviceMapCreate) -> DeviceMapResponse:
    async with get_session() as session:
        row = await trade_in.create_device_map(session, body.model_dump())
        return DeviceMapResponse(device_map=DeviceMapOut.model_validate(row))
