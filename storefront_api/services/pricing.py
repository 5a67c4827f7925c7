"""Admin pricing and variant image helpers on top of the platform API."""

import logging
from typing import Any

from storefront_api.services.commerce_client import CommerceClient, get_commerce_client
from storefront_api.services.errors import NotFoundError, ValidationFailedError

logger = logging.getLogger("uvicorn.error")

PAGE_SIZE = 100
MAX_PRODUCTS = 1000


def flatten_variants(products: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """One row per variant with its parent product summary."""
    rows = []
    for product in products:
        for variant in product.get("variants") or []:
            rows.append(
                {
                    "id": variant.get("id"),
                    "title": variant.get("title") or "Default",
                    "sku": variant.get("sku"),
                    "product": {
                        "id": product.get("id"),
                        "title": product.get("title"),
                        "thumbnail": product.get("thumbnail"),
                    },
                    "prices": [
                        {
                            "id": price.get("id"),
                            "amount": price.get("amount"),
                            "currency_code": price.get("currency_code"),
                        }
                        for price in variant.get("prices") or []
                    ],
                }
            )
    return rows


async def list_variant_prices(commerce: CommerceClient | None = None) -> list[dict[str, Any]]:
    commerce = commerce or get_commerce_client()
    products: list[dict[str, Any]] = []
    offset = 0
    while offset < MAX_PRODUCTS:
        page = await commerce.list_products(
            limit=PAGE_SIZE,
            offset=offset,
            fields="id,title,thumbnail,*variants,*variants.prices",
        )
        products.extend(page)
        if len(page) < PAGE_SIZE:
            break
        offset += PAGE_SIZE
    return flatten_variants(products)


async def update_variant_price(
    variant_id: str,
    amount: float,
    currency_code: str = "mnt",
    commerce: CommerceClient | None = None,
) -> dict[str, Any]:
    """Update the existing price of a variant in one currency.

    Creating a price in a new currency is not supported here.
    """
    commerce = commerce or get_commerce_client()
    currency_code = currency_code.lower()

    variant = await commerce.retrieve_variant(variant_id)
    if variant is None:
        raise NotFoundError("Variant not found")

    existing = next(
        (price for price in variant.get("prices") or [] if (price.get("currency_code") or "").lower() == currency_code),
        None,
    )
    if existing is None:
        raise ValidationFailedError(
            "Cannot create new price directly. Add the currency on the product first.",
            detail={"currency_code": currency_code},
        )

    await commerce.update_variant_price(variant, existing["id"], amount, currency_code)
    logger.info(f"[pricing] variant_id={variant_id} {currency_code}={amount}")
    return {
        "success": True,
        "variant_id": variant_id,
        "updated_price": {"amount": amount, "currency_code": currency_code},
    }


async def set_variant_images(
    variant_id: str,
    image_ids: list[str],
    thumbnail_id: str | None = None,
    commerce: CommerceClient | None = None,
) -> dict[str, Any]:
    """Set the variant thumbnail from one of the listed product images."""
    commerce = commerce or get_commerce_client()

    variant = await commerce.retrieve_variant(variant_id)
    if variant is None:
        raise NotFoundError("Variant not found")

    if thumbnail_id and thumbnail_id in image_ids and variant.get("product_id"):
        images = await commerce.list_product_images(variant["product_id"])
        thumbnail = next((image for image in images if image.get("id") == thumbnail_id), None)
        if thumbnail and thumbnail.get("url"):
            await commerce.update_variant(variant["product_id"], variant_id, {"thumbnail": thumbnail["url"]})
            logger.info(f"[pricing] variant_id={variant_id} thumbnail={thumbnail_id}")

    return {"success": True, "variant": await commerce.retrieve_variant(variant_id)}
