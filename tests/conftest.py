"""Shared fixtures: SQLite database, ASGI client and in-memory platform fakes."""

import copy
from datetime import datetime
from typing import Any

import jwt
import pytest
from httpx import ASGITransport, AsyncClient

from storefront_api.main import app
from storefront_api.services import commerce_client, notifications
from storefront_api.services.auth import JWT_ALGORITHM
from storefront_api.services.commerce_client import CommerceError
from storefront_api.settings import get_settings
from storefront_api.stores import postgres

ADMIN_TOKEN = "test-admin-token"
JWT_SECRET = "test-jwt-secret-that-is-long-enough-for-hs256"


class FakeCommerce:
    """In-memory stand-in for the commerce platform client."""

    def __init__(self) -> None:
        self.products: dict[str, dict[str, Any]] = {}
        self.product_list: list[dict[str, Any]] = []
        self.product_images: dict[str, list[dict[str, Any]]] = {}
        self.variants: dict[str, dict[str, Any]] = {}
        self.carts: dict[str, dict[str, Any]] = {}
        self.abandoned: list[dict[str, Any]] = []
        self.orders: dict[str, dict[str, Any]] = {}
        self.customers: dict[str, dict[str, Any]] = {}
        self.customer_orders: dict[str, list[dict[str, Any]]] = {}
        self.customer_updates: list[tuple[str, dict[str, Any]]] = []
        self.promotions: list[dict[str, Any]] = []
        self.price_updates: list[tuple[str, str, float, str]] = []
        self.calls: list[str] = []
        self.fail: set[str] = set()

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail:
            raise CommerceError(f"{name} failed", status_code=400)

    def _cart(self, cart_id: str) -> dict[str, Any]:
        if cart_id not in self.carts:
            raise CommerceError(f"Cart {cart_id} not found", status_code=404)
        return self.carts[cart_id]

    async def retrieve_product(self, product_id: str, fields: str = "") -> dict[str, Any]:
        self._record("retrieve_product")
        if product_id not in self.products:
            raise CommerceError(f"Product with id: {product_id} was not found", status_code=404)
        return copy.deepcopy(self.products[product_id])

    async def list_products(self, **kwargs: Any) -> list[dict[str, Any]]:
        self._record("list_products")
        offset = kwargs.get("offset") or 0
        limit = kwargs.get("limit") or len(self.product_list)
        return copy.deepcopy(self.product_list[offset : offset + limit])

    async def retrieve_variant(self, variant_id: str) -> dict[str, Any] | None:
        self._record("retrieve_variant")
        variant = self.variants.get(variant_id)
        return copy.deepcopy(variant) if variant else None

    async def update_variant(self, product_id: str, variant_id: str, data: dict[str, Any]) -> dict[str, Any]:
        self._record("update_variant")
        self.variants[variant_id].update(data)
        return copy.deepcopy(self.variants[variant_id])

    async def update_variant_price(
        self, variant: dict[str, Any], price_id: str, amount: float, currency_code: str
    ) -> dict[str, Any]:
        self._record("update_variant_price")
        self.price_updates.append((variant["id"], price_id, amount, currency_code))
        return variant

    async def list_product_images(self, product_id: str) -> list[dict[str, Any]]:
        self._record("list_product_images")
        return self.product_images.get(product_id, [])

    async def retrieve_cart(self, cart_id: str) -> dict[str, Any]:
        self._record("retrieve_cart")
        return copy.deepcopy(self._cart(cart_id))

    async def update_cart(self, cart_id: str, data: dict[str, Any]) -> dict[str, Any]:
        self._record("update_cart")
        cart = self._cart(cart_id)
        cart.update(copy.deepcopy(data))
        return copy.deepcopy(cart)

    async def add_shipping_method(self, cart_id: str, option_id: str) -> dict[str, Any]:
        self._record("add_shipping_method")
        cart = self._cart(cart_id)
        cart["shipping_methods"] = [{"shipping_option_id": option_id}]
        return copy.deepcopy(cart)

    async def add_promotions(self, cart_id: str, promo_codes: list[str]) -> dict[str, Any]:
        self._record("add_promotions")
        cart = self._cart(cart_id)
        cart.setdefault("promotions", []).extend({"code": code} for code in promo_codes)
        return copy.deepcopy(cart)

    async def remove_promotions(self, cart_id: str, promo_codes: list[str]) -> dict[str, Any]:
        self._record("remove_promotions")
        cart = self._cart(cart_id)
        cart["promotions"] = [p for p in cart.get("promotions", []) if p["code"] not in promo_codes]
        return copy.deepcopy(cart)

    async def list_abandoned_carts(self, updated_before: datetime, limit: int = 200) -> list[dict[str, Any]]:
        self._record("list_abandoned_carts")
        return copy.deepcopy(self.abandoned[:limit])

    async def create_promotion(self, data: dict[str, Any]) -> dict[str, Any]:
        self._record("create_promotion")
        self.promotions.append(data)
        return {"id": f"promo_{len(self.promotions)}", **data}

    async def retrieve_order(self, order_id: str) -> dict[str, Any]:
        self._record("retrieve_order")
        if order_id not in self.orders:
            raise CommerceError(f"Order {order_id} not found", status_code=404)
        return copy.deepcopy(self.orders[order_id])

    async def list_customer_orders(self, customer_id: str, limit: int = 100) -> list[dict[str, Any]]:
        self._record("list_customer_orders")
        return copy.deepcopy(self.customer_orders.get(customer_id, []))

    async def list_customer_order_page(
        self, customer_id: str, *, limit: int = 10, offset: int = 0, fields: str = ""
    ) -> dict[str, Any]:
        self._record("list_customer_order_page")
        orders = self.customer_orders.get(customer_id, [])
        return {
            "orders": copy.deepcopy(orders[offset : offset + limit]),
            "count": len(orders),
            "offset": offset,
            "limit": limit,
        }

    async def retrieve_customer(self, customer_id: str, fields: str | None = None) -> dict[str, Any]:
        self._record("retrieve_customer")
        return copy.deepcopy(self.customers.get(customer_id, {}))

    async def update_customer(self, customer_id: str, data: dict[str, Any]) -> dict[str, Any]:
        self._record("update_customer")
        self.customer_updates.append((customer_id, data))
        self.customers.setdefault(customer_id, {"id": customer_id}).update(data)
        return copy.deepcopy(self.customers[customer_id])


class FakeNotifier:
    """Records emails instead of sending them."""

    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.sent: list[dict[str, Any]] = []

    async def send_abandoned_cart(self, cart: dict[str, Any], discount_code: str) -> bool:
        self.sent.append({"kind": "abandoned_cart", "cart_id": cart["id"], "discount_code": discount_code})
        return self.result

    async def send_tier_upgrade(
        self,
        email: str | None,
        customer_name: str | None,
        old_tier: str,
        new_tier: str,
        points_balance: int,
    ) -> bool:
        self.sent.append(
            {
                "kind": "tier_upgrade",
                "email": email,
                "customer_name": customer_name,
                "old_tier": old_tier,
                "new_tier": new_tier,
                "points_balance": points_balance,
            }
        )
        return self.result


@pytest.fixture(autouse=True)
def settings(monkeypatch: pytest.MonkeyPatch):
    """Known secrets for every test."""
    s = get_settings()
    monkeypatch.setattr(s, "admin_api_token", ADMIN_TOKEN)
    monkeypatch.setattr(s, "jwt_secret", JWT_SECRET)
    monkeypatch.setattr(s, "resend_api_key", "")
    return s


@pytest.fixture
async def db(tmp_path):
    """Fresh SQLite database with all tables."""
    await postgres.init_db(f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}")
    await postgres.create_tables()
    yield
    await postgres.close_db()


@pytest.fixture
async def session(db):
    async with postgres.get_session() as s:
        yield s


@pytest.fixture
def commerce(monkeypatch: pytest.MonkeyPatch) -> FakeCommerce:
    """Fake platform installed as the shared client."""
    fake = FakeCommerce()
    monkeypatch.setattr(commerce_client, "_client", fake)
    return fake


@pytest.fixture
def notifier(monkeypatch: pytest.MonkeyPatch) -> FakeNotifier:
    fake = FakeNotifier()
    monkeypatch.setattr(notifications, "_notifier", fake)
    return fake


@pytest.fixture
async def client():
    """Create test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-Admin-Token": ADMIN_TOKEN}


def bearer(customer_id: str, secret: str = JWT_SECRET) -> dict[str, str]:
    token = jwt.encode({"actor_id": customer_id, "actor_type": "customer"}, secret, algorithm=JWT_ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    """Build customer bearer headers: ``auth_headers("cus_1")``."""
    return bearer
