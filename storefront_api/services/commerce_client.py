"""Commerce platform client.

The commerce framework owns products, variants, prices, carts, orders,
customers and promotions. This client wraps the platform REST API:

- Store API (publishable key header): carts, cart promotions, shipping methods
- Admin API (secret key, Basic auth): products, variants, orders, customers,
  promotions

Every non-2xx response raises CommerceError; routes map it to HTTP errors.
"""

import logging
from datetime import datetime
from typing import Any

import httpx

from storefront_api.settings import get_settings

logger = logging.getLogger("uvicorn.error")

PUBLISHABLE_KEY_HEADER = "x-publishable-api-key"

CART_FIELDS = (
    "id,email,currency_code,subtotal,total,completed_at,updated_at,metadata,"
    "*items,*shipping_methods,*payment_collection,*payment_collection.payment_sessions"
)

ORDER_HISTORY_FIELDS = (
    "id,display_id,status,created_at,total,currency_code,metadata,"
    "*items,*items.variant.product,*fulfillments,*payment_collections"
)


class CommerceError(RuntimeError):
    """Platform request failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class CommerceClient:
    """Client for the commerce platform Store and Admin APIs."""

    def __init__(
        self,
        base_url: str | None = None,
        publishable_key: str | None = None,
        secret_key: str | None = None,
        timeout: float | None = None,
    ):
        """Initialize client from settings unless overridden."""
        settings = get_settings()
        self.base_url = (base_url or settings.commerce_api_url).rstrip("/")
        self.publishable_key = publishable_key if publishable_key is not None else settings.commerce_publishable_key
        self.secret_key = secret_key if secret_key is not None else settings.commerce_secret_key
        self.timeout = timeout or settings.commerce_timeout_seconds
        self._http_client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        admin: bool,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        headers: dict[str, str] = {}
        auth: tuple[str, str] | None = None
        if admin:
            auth = (self.secret_key, "")
        else:
            headers[PUBLISHABLE_KEY_HEADER] = self.publishable_key

        client = await self._get_client()
        try:
            response = await client.request(method, path, params=params, json=json, headers=headers, auth=auth)
        except httpx.HTTPError as e:
            logger.error(f"[commerce] {method} {path} transport error: {e}")
            raise CommerceError(f"Commerce platform unreachable: {e}") from e

        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning(f"[commerce] {method} {path} -> {response.status_code}: {message}")
            raise CommerceError(message, status_code=response.status_code)

        if not response.content:
            return {}
        data = response.json()
        if not isinstance(data, dict):
            raise CommerceError(f"Unexpected response from {path}")
        return data

    # ============================================================
    # Products & variants (Admin API)
    # ============================================================

    async def retrieve_product(self, product_id: str, fields: str = "id,title,handle,metadata") -> dict[str, Any]:
        data = await self._request("GET", f"/admin/products/{product_id}", admin=True, params={"fields": fields})
        return data.get("product") or {}

    async def list_products(
        self,
        *,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
        order: str | None = None,
        fields: str | None = None,
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"limit": limit, "offset": offset}
        if status:
            params["status"] = status
        if order:
            params["order"] = order
        if fields:
            params["fields"] = fields
        data = await self._request("GET", "/admin/products", admin=True, params=params)
        return list(data.get("products") or [])

    async def list_variants(self, variant_ids: list[str], fields: str = "*prices,*images") -> list[dict[str, Any]]:
        data = await self._request(
            "GET",
            "/admin/product-variants",
            admin=True,
            params={"id": variant_ids, "fields": f"id,title,sku,thumbnail,product_id,{fields}"},
        )
        return list(data.get("variants") or [])

    async def retrieve_variant(self, variant_id: str) -> dict[str, Any] | None:
        variants = await self.list_variants([variant_id])
        return variants[0] if variants else None

    async def update_variant(self, product_id: str, variant_id: str, data: dict[str, Any]) -> dict[str, Any]:
        result = await self._request(
            "POST",
            f"/admin/products/{product_id}/variants/{variant_id}",
            admin=True,
            json=data,
        )
        product = result.get("product") or {}
        for variant in product.get("variants") or []:
            if variant.get("id") == variant_id:
                return variant
        return result.get("variant") or {}

    async def update_variant_price(
        self,
        variant: dict[str, Any],
        price_id: str,
        amount: float,
        currency_code: str,
    ) -> dict[str, Any]:
        """Replace the amount of an existing variant price, keeping the others."""
        prices = []
        for price in variant.get("prices") or []:
            if price.get("id") == price_id:
                prices.append({"id": price_id, "amount": amount, "currency_code": currency_code})
            else:
                prices.append(
                    {"id": price.get("id"), "amount": price.get("amount"), "currency_code": price.get("currency_code")}
                )
        return await self.update_variant(variant["product_id"], variant["id"], {"prices": prices})

    async def list_product_images(self, product_id: str) -> list[dict[str, Any]]:
        product = await self.retrieve_product(product_id, fields="id,*images")
        return list(product.get("images") or [])

    # ============================================================
    # Carts (Store API)
    # ============================================================

    async def retrieve_cart(self, cart_id: str) -> dict[str, Any]:
        data = await self._request("GET", f"/store/carts/{cart_id}", admin=False, params={"fields": CART_FIELDS})
        return data.get("cart") or {}

    async def update_cart(self, cart_id: str, data: dict[str, Any]) -> dict[str, Any]:
        result = await self._request("POST", f"/store/carts/{cart_id}", admin=False, json=data)
        return result.get("cart") or {}

    async def add_shipping_method(self, cart_id: str, option_id: str) -> dict[str, Any]:
        result = await self._request(
            "POST",
            f"/store/carts/{cart_id}/shipping-methods",
            admin=False,
            json={"option_id": option_id},
        )
        return result.get("cart") or {}

    async def add_promotions(self, cart_id: str, promo_codes: list[str]) -> dict[str, Any]:
        result = await self._request(
            "POST",
            f"/store/carts/{cart_id}/promotions",
            admin=False,
            json={"promo_codes": promo_codes},
        )
        return result.get("cart") or {}

    async def remove_promotions(self, cart_id: str, promo_codes: list[str]) -> dict[str, Any]:
        result = await self._request(
            "DELETE",
            f"/store/carts/{cart_id}/promotions",
            admin=False,
            json={"promo_codes": promo_codes},
        )
        return result.get("cart") or {}

    async def list_abandoned_carts(self, updated_before: datetime, limit: int = 200) -> list[dict[str, Any]]:
        """List uncompleted carts with an email, last updated before the cutoff."""
        data = await self._request(
            "GET",
            "/admin/carts",
            admin=True,
            params={
                "completed_at": "null",
                "email[$ne]": "null",
                "updated_at[$lt]": updated_before.isoformat(),
                "limit": limit,
                "fields": "id,email,subtotal,currency_code,updated_at,completed_at,metadata,*items",
            },
        )
        return list(data.get("carts") or [])

    # ============================================================
    # Promotions, orders, customers (Admin API)
    # ============================================================

    async def create_promotion(self, data: dict[str, Any]) -> dict[str, Any]:
        result = await self._request("POST", "/admin/promotions", admin=True, json=data)
        return result.get("promotion") or {}

    async def retrieve_order(self, order_id: str) -> dict[str, Any]:
        data = await self._request(
            "GET",
            f"/admin/orders/{order_id}",
            admin=True,
            params={"fields": "id,display_id,total,customer_id,email,metadata,cart.id,*items"},
        )
        return data.get("order") or {}

    async def list_customer_orders(self, customer_id: str, limit: int = 100) -> list[dict[str, Any]]:
        data = await self._request(
            "GET",
            "/admin/orders",
            admin=True,
            params={"customer_id": customer_id, "limit": limit, "fields": "id,*items"},
        )
        return list(data.get("orders") or [])

    async def list_customer_order_page(
        self,
        customer_id: str,
        *,
        limit: int = 10,
        offset: int = 0,
        fields: str = ORDER_HISTORY_FIELDS,
    ) -> dict[str, Any]:
        """One page of a customer's orders, newest first, with the total count."""
        data = await self._request(
            "GET",
            "/admin/orders",
            admin=True,
            params={
                "customer_id": customer_id,
                "limit": limit,
                "offset": offset,
                "order": "-created_at",
                "fields": fields,
            },
        )
        orders = list(data.get("orders") or [])
        return {
            "orders": orders,
            "count": data.get("count", len(orders)),
            "offset": data.get("offset", offset),
            "limit": data.get("limit", limit),
        }

    async def retrieve_customer(self, customer_id: str, fields: str | None = None) -> dict[str, Any]:
        params = {"fields": fields} if fields else None
        data = await self._request("GET", f"/admin/customers/{customer_id}", admin=True, params=params)
        return data.get("customer") or {}

    async def update_customer(self, customer_id: str, data: dict[str, Any]) -> dict[str, Any]:
        result = await self._request("POST", f"/admin/customers/{customer_id}", admin=True, json=data)
        return result.get("customer") or {}


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200] or f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("error") or payload)[:500]
    return str(payload)[:500]


# Singleton client instance
_client: CommerceClient | None = None


def get_commerce_client() -> CommerceClient:
    """Get commerce client singleton."""
    global _client
    if _client is None:
        _client = CommerceClient()
    return _client


async def close_commerce_client() -> None:
    global _client
    if _client is not None:
        await _client.close()
        _client = None
