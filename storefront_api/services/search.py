"""Popular search terms and featured products for the search overlay.

The payload is cached in Redis for 5 minutes. Platform failures fall back to
a fixed term list so the overlay always renders.
"""

import logging
from typing import Any

from redis.exceptions import RedisError

from storefront_api.services.commerce_client import CommerceClient, CommerceError, get_commerce_client
from storefront_api.stores.redis import get_popular_search_cache, set_popular_search_cache

logger = logging.getLogger("uvicorn.error")

FALLBACK_TERMS = ["iPhone 16", "MacBook Pro", "Galaxy S24", "PlayStation 5", "Ray-Ban Meta"]

FEATURED_LIMIT = 8
TERMS_LIMIT = 6

PRODUCT_FIELDS = "id,title,handle,thumbnail,created_at,*collection,*variants,*variants.prices"


def min_variant_price(product: dict[str, Any]) -> float | None:
    amounts = [
        price["amount"]
        for variant in product.get("variants") or []
        for price in variant.get("prices") or []
        if price.get("amount") is not None
    ]
    return min(amounts) if amounts else None


def build_popular_payload(products: list[dict[str, Any]]) -> dict[str, Any]:
    terms = [product["title"] for product in products if product.get("title")][:TERMS_LIMIT]
    featured = [
        {
            "id": product.get("id"),
            "title": product.get("title"),
            "handle": product.get("handle"),
            "thumbnail": product.get("thumbnail"),
            "min_price": min_variant_price(product),
            "collection_title": (product.get("collection") or {}).get("title"),
        }
        for product in products
    ]
    return {"terms": terms or list(FALLBACK_TERMS), "featured": featured}


async def popular_searches(commerce: CommerceClient | None = None) -> dict[str, Any]:
    try:
        cached = await get_popular_search_cache()
    except (RuntimeError, RedisError) as e:
        logger.debug(f"[search] cache unavailable: {e}")
        cached = None
    if cached:
        return cached

    commerce = commerce or get_commerce_client()
    try:
        products = await commerce.list_products(
            status="published",
            limit=FEATURED_LIMIT,
            order="-created_at",
            fields=PRODUCT_FIELDS,
        )
    except CommerceError as e:
        logger.warning(f"[search] popular searches failed, using fallback: {e.message}")
        return {"terms": list(FALLBACK_TERMS), "featured": []}

    payload = build_popular_payload(products)
    try:
        await set_popular_search_cache(payload)
    except (RuntimeError, RedisError) as e:
        logger.debug(f"[search] cache write skipped: {e}")
    return payload
