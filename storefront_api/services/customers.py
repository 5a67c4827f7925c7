"""Signed-in customer profile and order history, read from the platform."""

import logging
from typing import Any

from storefront_api.services.commerce_client import CommerceClient, CommerceError, get_commerce_client
from storefront_api.services.errors import NotFoundError

logger = logging.getLogger("uvicorn.error")

PROFILE_FIELDS = "*addresses"
PROFILE_UPDATABLE = ("first_name", "last_name", "phone")


def order_total(order: dict[str, Any]) -> float:
    """Order total, summed from line items when the platform reports 0."""
    total = order.get("total") or 0
    items = order.get("items") or []
    if total == 0 and items:
        for item in items:
            price = item.get("unit_price") or item.get("subtotal") or 0
            total += price * (item.get("quantity") or 1)
    return total


def payment_status(order: dict[str, Any]) -> str:
    collections = order.get("payment_collections") or []
    if not collections:
        return "awaiting_payment"
    return collections[-1].get("status") or "awaiting_payment"


def fulfillment_status(order: dict[str, Any]) -> str:
    fulfillments = order.get("fulfillments") or []
    if not fulfillments:
        return "canceled" if order.get("status") == "canceled" else "not_fulfilled"
    if all(f.get("canceled_at") for f in fulfillments):
        return "canceled"
    if any(f.get("delivered_at") for f in fulfillments):
        return "delivered"
    if any(f.get("shipped_at") for f in fulfillments):
        return "shipped"
    # created or packed, not yet shipped
    return "fulfilled"


def map_order(order: dict[str, Any]) -> dict[str, Any]:
    """Order as shown in the customer's history."""
    items = []
    for item in order.get("items") or []:
        product = (item.get("variant") or {}).get("product") or {}
        items.append(
            {
                **item,
                "thumbnail": item.get("thumbnail") or product.get("thumbnail"),
                "product_title": item.get("product_title") or product.get("title") or item.get("title"),
            }
        )

    return {
        **order,
        "items": items,
        "total": order_total(order),
        "payment_method": (order.get("metadata") or {}).get("payment_method"),
        "payment_status": payment_status(order),
        "fulfillment_status": fulfillment_status(order),
    }


async def get_profile(customer_id: str, commerce: CommerceClient | None = None) -> dict[str, Any]:
    commerce = commerce or get_commerce_client()
    try:
        customer = await commerce.retrieve_customer(customer_id, fields=PROFILE_FIELDS)
    except CommerceError as e:
        if e.is_not_found:
            raise NotFoundError("Customer not found") from e
        raise
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


async def update_profile(
    customer_id: str,
    changes: dict[str, Any],
    commerce: CommerceClient | None = None,
) -> dict[str, Any]:
    """Update name and phone, then return the refreshed profile."""
    commerce = commerce or get_commerce_client()
    data = {key: value for key, value in changes.items() if key in PROFILE_UPDATABLE}
    if data:
        await commerce.update_customer(customer_id, data)
        logger.info(f"[customers] profile updated customer_id={customer_id} fields={sorted(data)}")
    return await get_profile(customer_id, commerce)


async def list_orders(
    customer_id: str,
    limit: int = 10,
    offset: int = 0,
    commerce: CommerceClient | None = None,
) -> dict[str, Any]:
    commerce = commerce or get_commerce_client()
    page = await commerce.list_customer_order_page(customer_id, limit=limit, offset=offset)
    return {
        "orders": [map_order(order) for order in page["orders"]],
        "count": page["count"],
        "offset": page["offset"],
        "limit": page["limit"],
    }
