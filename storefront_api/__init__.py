"""Storefront Extensions API - banners, product analytics, loyalty and trade-in."""
