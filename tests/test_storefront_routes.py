"""Tests for fast checkout and popular search endpoints."""

import pytest
from httpx import AsyncClient

ADDRESS = {
    "first_name": "Bat",
    "last_name": "Dorj",
    "address_1": "Peace Avenue 1",
    "city": "Ulaanbaatar",
    "country_code": "mn",
    "phone": "99112233",
}

CHECKOUT = {"email": "bat@example.mn", "shipping_address": ADDRESS, "shipping_option_id": "so_standard"}


@pytest.mark.asyncio
async def test_fast_checkout_sets_everything(client: AsyncClient, commerce):
    commerce.carts["cart_1"] = {"id": "cart_1", "metadata": {}}

    response = await client.post("/store/carts/cart_1/fast-checkout", json=CHECKOUT)

    assert response.status_code == 200
    cart = response.json()["cart"]
    assert cart["email"] == "bat@example.mn"
    assert cart["billing_address"] == cart["shipping_address"]
    assert cart["shipping_methods"] == [{"shipping_option_id": "so_standard"}]


@pytest.mark.asyncio
async def test_fast_checkout_keeps_matching_shipping_method(client: AsyncClient, commerce):
    commerce.carts["cart_1"] = {"id": "cart_1", "shipping_methods": [{"shipping_option_id": "so_standard"}]}

    response = await client.post("/store/carts/cart_1/fast-checkout", json=CHECKOUT)

    assert response.status_code == 200
    assert "add_shipping_method" not in commerce.calls


@pytest.mark.asyncio
async def test_fast_checkout_platform_failure_is_400(client: AsyncClient, commerce):
    commerce.carts["cart_1"] = {"id": "cart_1"}
    commerce.fail.add("add_shipping_method")

    response = await client.post("/store/carts/cart_1/fast-checkout", json=CHECKOUT)

    assert response.status_code == 400
    assert response.json()["error"] == {
        "code": "VALIDATION_FAILED",
        "message": "add_shipping_method failed",
        "detail": None,
    }


@pytest.mark.asyncio
async def test_fast_checkout_validates_body(client: AsyncClient, commerce):
    response = await client.post("/store/carts/cart_1/fast-checkout", json={"email": "bat@example.mn"})
    assert response.status_code == 400
    assert commerce.calls == []


@pytest.mark.asyncio
async def test_popular_searches(client: AsyncClient, commerce):
    commerce.product_list = [
        {"id": "prod_1", "title": "iPhone 16", "handle": "iphone-16", "variants": [{"prices": [{"amount": 10}]}]},
        {"id": "prod_2", "title": "AirPods Pro", "handle": "airpods-pro", "variants": []},
    ]

    response = await client.get("/store/search/popular")

    assert response.status_code == 200
    data = response.json()
    assert data["terms"] == ["iPhone 16", "AirPods Pro"]
    assert data["featured"][0]["min_price"] == 10
    assert data["featured"][1]["min_price"] is None


@pytest.mark.asyncio
async def test_popular_searches_fallback(client: AsyncClient, commerce):
    commerce.fail.add("list_products")

    response = await client.get("/store/search/popular")

    assert response.status_code == 200
    assert response.json() == {
        "terms": ["iPhone 16", "MacBook Pro", "Galaxy S24", "PlayStation 5", "Ray-Ban Meta"],
        "featured": [],
    }
