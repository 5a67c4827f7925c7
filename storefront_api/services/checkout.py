"""Fast checkout: contact details, addresses and shipping in one request."""

import logging
from typing import Any

from storefront_api.services.commerce_client import CommerceClient, get_commerce_client

logger = logging.getLogger("uvicorn.error")


def needs_shipping_update(cart: dict[str, Any], shipping_option_id: str) -> bool:
    methods = cart.get("shipping_methods") or []
    if not methods:
        return True
    return methods[0].get("shipping_option_id") != shipping_option_id


async def fast_checkout(
    cart_id: str,
    *,
    email: str,
    shipping_address: dict[str, Any],
    shipping_option_id: str,
    billing_address: dict[str, Any] | None = None,
    commerce: CommerceClient | None = None,
) -> dict[str, Any]:
    """Update the cart then set its shipping method if it changed.

    Steps that already succeeded are not rolled back when a later one fails;
    the client can safely retry the whole call.

    Raises:
        CommerceError: Any platform step failed.
    """
    commerce = commerce or get_commerce_client()

    updated = await commerce.update_cart(
        cart_id,
        {
            "email": email,
            "shipping_address": shipping_address,
            "billing_address": billing_address or shipping_address,
        },
    )

    if needs_shipping_update(updated, shipping_option_id):
        await commerce.add_shipping_method(cart_id, shipping_option_id)
        logger.info(f"[checkout] shipping method set cart_id={cart_id} option={shipping_option_id}")

    return {"cart": await commerce.retrieve_cart(cart_id)}
