"""Tests for order history mapping."""

import pytest

from storefront_api.services.customers import fulfillment_status, map_order, order_total, payment_status


def test_order_total_prefers_platform_total():
    assert order_total({"total": 4500, "items": [{"unit_price": 1, "quantity": 1}]}) == 4500


def test_order_total_falls_back_to_items():
    order = {
        "total": 0,
        "items": [
            {"unit_price": 1000, "quantity": 2},
            {"subtotal": 500},
            {"unit_price": None, "subtotal": None},
        ],
    }
    assert order_total(order) == 2500


def test_payment_status_uses_last_collection():
    assert payment_status({}) == "awaiting_payment"
    order = {"payment_collections": [{"status": "not_paid"}, {"status": "authorized"}]}
    assert payment_status(order) == "authorized"


@pytest.mark.parametrize(
    "order, expected",
    [
        ({"status": "pending"}, "not_fulfilled"),
        ({"status": "canceled"}, "canceled"),
        ({"fulfillments": [{"canceled_at": "2025-01-01"}]}, "canceled"),
        ({"fulfillments": [{"shipped_at": "2025-01-01"}, {"delivered_at": "2025-01-02"}]}, "delivered"),
        ({"fulfillments": [{"shipped_at": "2025-01-01"}]}, "shipped"),
        ({"fulfillments": [{"packed_at": "2025-01-01"}]}, "fulfilled"),
    ],
)
def test_fulfillment_status(order, expected):
    assert fulfillment_status(order) == expected


def test_map_order_fills_item_title_and_thumbnail_from_product():
    order = {
        "id": "order_1",
        "total": 100,
        "metadata": {"payment_method": "qpay"},
        "items": [{"title": "256GB", "variant": {"product": {"title": "iPhone 16", "thumbnail": "t.jpg"}}}],
    }
    mapped = map_order(order)
    assert mapped["payment_method"] == "qpay"
    assert mapped["items"][0]["product_title"] == "iPhone 16"
    assert mapped["items"][0]["thumbnail"] == "t.jpg"

