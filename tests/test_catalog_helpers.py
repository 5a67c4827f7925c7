"""Tests for search payload and pricing row helpers."""

from storefront_api.services.pricing import flatten_variants
from storefront_api.services.search import FALLBACK_TERMS, build_popular_payload, min_variant_price

PRODUCT = {
    "id": "prod_1",
    "title": "iPhone 16",
    "handle": "iphone-16",
    "thumbnail": "https://cdn/iphone.jpg",
    "collection": {"title": "Apple"},
    "variants": [
        {"id": "var_1", "title": "128GB", "sku": "IP16-128", "prices": [{"id": "p1", "amount": 3200000, "currency_code": "mnt"}]},
        {"id": "var_2", "title": None, "prices": [{"id": "p2", "amount": 2900000, "currency_code": "mnt"}]},
    ],
}


def test_min_variant_price():
    assert min_variant_price(PRODUCT) == 2900000
    assert min_variant_price({"variants": [{"prices": []}]}) is None


def test_build_popular_payload():
    payload = build_popular_payload([PRODUCT])
    assert payload["terms"] == ["iPhone 16"]
    assert payload["featured"] == [
        {
            "id": "prod_1",
            "title": "iPhone 16",
            "handle": "iphone-16",
            "thumbnail": "https://cdn/iphone.jpg",
            "min_price": 2900000,
            "collection_title": "Apple",
        }
    ]


def test_build_popular_payload_without_titles_uses_fallback_terms():
    payload = build_popular_payload([{"id": "prod_2"}])
    assert payload["terms"] == FALLBACK_TERMS
    assert payload["featured"][0]["collection_title"] is None


def test_flatten_variants():
    rows = flatten_variants([PRODUCT, {"id": "prod_empty", "variants": []}])
    assert [row["id"] for row in rows] == ["var_1", "var_2"]
    assert rows[1]["title"] == "Default"
    assert rows[0]["product"] == {"id": "prod_1", "title": "iPhone 16", "thumbnail": "https://cdn/iphone.jpg"}
    assert rows[0]["prices"] == [{"id": "p1", "amount": 3200000, "currency_code": "mnt"}]
