"""Tests for email rendering and the Resend notifier."""

import json

import httpx
import pytest

from storefront_api.services.notifications import (
    RESEND_API_URL,
    EmailNotifier,
    format_mnt,
    render_abandoned_cart,
    render_tier_upgrade,
)


def notifier_with(handler) -> EmailNotifier:
    notifier = EmailNotifier(api_key="re_test", from_address="Shop <noreply@example.mn>")
    notifier._http_client = httpx.AsyncClient(base_url=RESEND_API_URL, transport=httpx.MockTransport(handler))
    return notifier


def test_format_mnt():
    assert format_mnt(3200000) == "3'200'000₮"
    assert format_mnt(None) == "0₮"


def test_abandoned_cart_html_escapes_titles():
    cart = {"items": [{"title": "<b>iPhone</b>", "quantity": 2, "unit_price": 1500}], "subtotal": 3000}
    html = render_abandoned_cart(cart, "https://shop.example.mn/cart", "CART10")
    assert "&lt;b&gt;iPhone&lt;/b&gt;" in html
    assert "x2" in html
    assert "3'000₮" in html
    assert "CART10" in html


def test_tier_upgrade_html_lists_new_benefits():
    html = render_tier_upgrade("Bat", "bronze", "silver", 12500)
    assert "Хүрэл" in html
    assert "Мөнгө" in html
    assert "5% байнгын хөнгөлөлт" in html
    assert "12,500" in html


@pytest.mark.asyncio
async def test_send_posts_to_resend():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "email_1"})

    notifier = notifier_with(handler)
    assert await notifier.send("bat@example.mn", "Hello", "<p>Hi</p>") is True
    await notifier.close()

    assert seen[0].url.path == "/emails"
    assert seen[0].headers["authorization"] == "Bearer re_test"
    assert json.loads(seen[0].content) == {
        "from": "Shop <noreply@example.mn>",
        "to": ["bat@example.mn"],
        "subject": "Hello",
        "html": "<p>Hi</p>",
    }


@pytest.mark.asyncio
async def test_send_reports_provider_error():
    notifier = notifier_with(lambda request: httpx.Response(422, json={"message": "invalid from"}))
    assert await notifier.send("bat@example.mn", "Hello", "<p>Hi</p>") is False
    await notifier.close()


@pytest.mark.asyncio
async def test_send_skips_without_key_or_recipient():
    calls: list[httpx.Request] = []
    notifier = notifier_with(lambda request: calls.append(request) or httpx.Response(200))

    assert await notifier.send(None, "Hello", "<p>Hi</p>") is False
    notifier.api_key = ""
    assert await notifier.send("bat@example.mn", "Hello", "<p>Hi</p>") is False
    await notifier.close()

    assert calls == []
