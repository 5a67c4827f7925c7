"""Data stores for persistence and caching.

Stores handle:
- PostgreSQL: DB session, ORM base, engine lifecycle
- Redis: caching, rate-limit windows, locks, TTL policies

No business logic in stores - that belongs in services.
"""
