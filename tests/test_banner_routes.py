"""Tests for store and admin banner endpoints."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

HERO = {
    "title": "iPhone 16 Pro",
    "image_url": "https://cdn.example.mn/hero.jpg",
    "link": "/products/iphone-16-pro",
    "placement": "hero",
    "sort_order": 2,
    "metadata": {"campaign": "launch"},
}


@pytest.mark.asyncio
async def test_admin_requires_token(client: AsyncClient, db):
    response = await client.get("/admin/banners")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"

    response = await client.get("/admin/banners", headers={"X-Admin-Token": "wrong"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_admin_disabled_without_configured_token(client: AsyncClient, db, settings, monkeypatch):
    monkeypatch.setattr(settings, "admin_api_token", "")
    response = await client.get("/admin/banners", headers={"X-Admin-Token": ""})
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Admin API is disabled"


@pytest.mark.asyncio
async def test_banner_crud(client: AsyncClient, db, admin_headers):
    response = await client.post("/admin/banners", json=HERO, headers=admin_headers)
    assert response.status_code == 201
    banner = response.json()["banner"]
    assert banner["id"].startswith("banner_")
    assert banner["grid_size"] == "3x3"
    assert banner["is_active"] is True
    assert banner["metadata"] == {"campaign": "launch"}

    response = await client.put(
        f"/admin/banners/{banner['id']}",
        json={"title": "iPhone 16 Pro Max", "is_active": False},
        headers=admin_headers,
    )
    assert response.status_code == 200
    updated = response.json()["banner"]
    assert updated["title"] == "iPhone 16 Pro Max"
    assert updated["is_active"] is False
    assert updated["link"] == HERO["link"]

    response = await client.get(f"/admin/banners/{banner['id']}", headers=admin_headers)
    assert response.status_code == 200

    response = await client.delete(f"/admin/banners/{banner['id']}", headers=admin_headers)
    assert response.status_code == 204

    response = await client.get(f"/admin/banners/{banner['id']}", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"

    response = await client.get("/admin/banners", headers=admin_headers)
    assert response.json()["banners"] == []


@pytest.mark.asyncio
async def test_create_banner_requires_fields(client: AsyncClient, db, admin_headers):
    response = await client.post("/admin/banners", json={"title": "No image"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Missing required fields: image_url, link, placement"


@pytest.mark.asyncio
async def test_create_banner_rejects_unknown_placement(client: AsyncClient, db, admin_headers):
    response = await client.post("/admin/banners", json={**HERO, "placement": "sidebar"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"]["detail"] == {"allowed": ["hero", "bento", "product_grid"]}


@pytest.mark.asyncio
async def test_store_lists_only_live_banners(client: AsyncClient, db, admin_headers):
    now = datetime.now(timezone.utc)
    live = {**HERO, "title": "live", "sort_order": 1}
    later = {**HERO, "title": "later", "starts_at": (now + timedelta(days=1)).isoformat()}
    expired = {**HERO, "title": "expired", "ends_at": (now - timedelta(days=1)).isoformat()}
    hidden = {**HERO, "title": "hidden", "is_active": False}
    grid = {**HERO, "title": "grid", "placement": "product_grid", "section": "apple", "grid_size": "2x2"}
    for body in (live, later, expired, hidden, grid):
        response = await client.post("/admin/banners", json=body, headers=admin_headers)
        assert response.status_code == 201

    response = await client.get("/store/banners", params={"placement": "hero"})
    assert response.status_code == 200
    assert [b["title"] for b in response.json()["banners"]] == ["live"]

    response = await client.get("/store/banners", params={"placement": "product_grid", "section": "apple"})
    assert [b["grid_size"] for b in response.json()["banners"]] == ["2x2"]

    response = await client.get("/admin/banners", params={"placement": "hero"}, headers=admin_headers)
    assert len(response.json()["banners"]) == 4


@pytest.mark.asyncio
async def test_banner_config(client: AsyncClient, admin_headers):
    response = await client.get("/admin/banners/config", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["placements"] == ["hero", "bento", "product_grid"]


@pytest.mark.asyncio
async def test_update_banner_rejects_null_required_fields(client: AsyncClient, db, admin_headers):
    response = await client.post("/admin/banners", json=HERO, headers=admin_headers)
    banner_id = response.json()["banner"]["id"]

    response = await client.put(
        f"/admin/banners/{banner_id}",
        json={"image_url": None, "placement": None, "title": None},
        headers=admin_headers,
    )
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_FAILED"
    assert error["detail"] == {"fields": ["image_url", "placement"]}

    response = await client.get(f"/admin/banners/{banner_id}", headers=admin_headers)
    assert response.json()["banner"]["image_url"] == HERO["image_url"]
