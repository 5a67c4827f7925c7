"""Tests for product analytics endpoints."""

import pytest
from httpx import AsyncClient


@pytest.fixture
def shopper(commerce):
    commerce.customers["cus_1"] = {"id": "cus_1", "first_name": "Bat", "last_name": "Dorj", "email": "bat@example.mn"}
    commerce.customer_orders["cus_1"] = [{"id": "order_1", "items": [{"product_id": "prod_1", "quantity": 1}]}]
    return commerce


@pytest.mark.asyncio
async def test_review_requires_customer(client: AsyncClient, db, shopper):
    response = await client.post("/store/product-analytics/reviews/prod_1", json={"rating": 5, "comment": "Nice"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_review_with_invalid_token_is_anonymous(client: AsyncClient, db, shopper, auth_headers):
    response = await client.post(
        "/store/product-analytics/reviews/prod_1",
        json={"rating": 5, "comment": "Nice"},
        headers=auth_headers("cus_1", secret="another-secret-that-is-long-enough-too"),
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_review_rating_out_of_range(client: AsyncClient, db, shopper, auth_headers):
    response = await client.post(
        "/store/product-analytics/reviews/prod_1",
        json={"rating": 6, "comment": "Too good"},
        headers=auth_headers("cus_1"),
    )
    assert response.status_code == 400
    assert response.json()["error"] == {
        "code": "VALIDATION_FAILED",
        "message": "Rating must be between 1 and 5",
        "detail": None,
    }
    assert "retrieve_customer" not in shopper.calls


@pytest.mark.asyncio
async def test_review_lifecycle(client: AsyncClient, db, shopper, auth_headers, admin_headers):
    response = await client.post(
        "/store/product-analytics/reviews/prod_1",
        json={"rating": 4, "comment": "Fast delivery", "title": "Good"},
        headers=auth_headers("cus_1"),
    )
    assert response.status_code == 200
    body = response.json()
    review = body["review"]
    assert body["message"]
    assert review["customer_name"] == "Bat Dorj"
    assert review["verified_purchase"] is True
    assert review["is_approved"] is False

    response = await client.get("/store/product-analytics/reviews/prod_1")
    assert response.json()["reviews"] == []

    response = await client.get("/admin/product-analytics/reviews", headers=admin_headers)
    assert [r["id"] for r in response.json()["reviews"]] == [review["id"]]

    response = await client.post(f"/admin/product-analytics/reviews/{review['id']}/approve", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["review"]["is_approved"] is True

    response = await client.post(f"/store/product-analytics/reviews/{review['id']}/helpful")
    assert response.json() == {"success": True, "helpful_count": 1}

    response = await client.get("/store/product-analytics/reviews/prod_1")
    data = response.json()
    assert [r["id"] for r in data["reviews"]] == [review["id"]]
    assert data["rating"] == {"average": 4.0, "count": 1}


@pytest.mark.asyncio
async def test_unverified_review(client: AsyncClient, db, shopper, auth_headers):
    response = await client.post(
        "/store/product-analytics/reviews/prod_2",
        json={"rating": 3, "comment": "Okay"},
        headers=auth_headers("cus_1"),
    )
    assert response.json()["review"]["verified_purchase"] is False


@pytest.mark.asyncio
async def test_helpful_on_unknown_review(client: AsyncClient, db):
    response = await client.post("/store/product-analytics/reviews/prev_missing/helpful")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_view_tracking_and_stats(client: AsyncClient, db, auth_headers):
    await client.post("/store/product-analytics/view", json={"product_id": "prod_1", "session_id": "s1"})
    await client.post("/store/product-analytics/view", json={"product_id": "prod_1", "session_id": "s2"})
    response = await client.post(
        "/store/product-analytics/view",
        json={"product_id": "prod_1", "session_id": "s3"},
        headers=auth_headers("cus_1"),
    )
    assert response.status_code == 200
    assert response.json() == {"success": True, "current_viewers": 3}

    response = await client.get("/store/product-analytics/stats/prod_1")
    assert response.json() == {
        "product_id": "prod_1",
        "current_viewers": 3,
        "recent_sales_24h": 0,
        "rating": {"average": 0, "count": 0},
    }


@pytest.mark.asyncio
async def test_view_requires_product_id(client: AsyncClient, db):
    response = await client.post("/store/product-analytics/view", json={"product_id": "  "})
    assert response.status_code == 400
