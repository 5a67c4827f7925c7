"""Redis store for caching, rate limiting and distributed locks.

Handles:
- Caching with TTL policies
- Fixed-window request counters (rate limiting)
- Distributed locks (single-flight scheduled jobs)

TTL policies:
- Popular search payload: 5 minutes
- Abandoned-cart job lock: 1 hour
"""

import json
import logging
from typing import Any

import redis.asyncio as redis

from storefront_api.settings import get_settings

# TTL constants (in seconds)
TTL_POPULAR_SEARCH = 300  # 5 minutes
TTL_JOB_LOCK = 3600  # 1 hour

# Key prefixes
PREFIX_POPULAR_SEARCH = "search:popular"
PREFIX_RATE_LIMIT = "ratelimit:"
PREFIX_LOCK = "lock:"

# Redis client (initialized on startup)
_redis: redis.Redis | None = None
logger = logging.getLogger("uvicorn.error")


async def init_redis() -> None:
    """Initialize Redis connection."""
    global _redis
    settings = get_settings()
    _redis = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    # Validate connectivity early (especially for `rediss://` in production).
    await _redis.ping()
    logger.info("Redis connected")


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def _get_redis() -> redis.Redis:
    """Get Redis client instance."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


# ============================================================
# Generic cache operations
# ============================================================


async def cache_get(key: str) -> str | None:
    """Get value from cache.

    Args:
        key: Cache key.

    Returns:
        Cached value or None if not found.
    """
    return await _get_redis().get(key)


async def cache_set(key: str, value: str, ttl: int) -> None:
    """Set value in cache with TTL.

    Args:
        key: Cache key.
        value: Value to cache.
        ttl: Time-to-live in seconds.
    """
    await _get_redis().setex(key, ttl, value)


async def cache_delete(key: str) -> None:
    """Delete value from cache."""
    await _get_redis().delete(key)


async def cache_get_json(key: str) -> dict[str, Any] | None:
    """Get JSON value from cache.

    Returns:
        Parsed JSON dict or None if not found.
    """
    value = await cache_get(key)
    if value:
        return json.loads(value)
    return None


async def cache_set_json(key: str, value: dict[str, Any], ttl: int) -> None:
    """Set JSON value in cache."""
    await cache_set(key, json.dumps(value, default=str), ttl)


# ============================================================
# Specialized cache operations
# ============================================================


async def get_popular_search_cache() -> dict[str, Any] | None:
    """Get cached popular-search payload."""
    return await cache_get_json(PREFIX_POPULAR_SEARCH)


async def set_popular_search_cache(payload: dict[str, Any]) -> None:
    """Cache popular-search payload (TTL 5 minutes)."""
    await cache_set_json(PREFIX_POPULAR_SEARCH, payload, TTL_POPULAR_SEARCH)


# ============================================================
# Rate limiting (fixed window)
# ============================================================


async def hit_rate_window(key: str, window_seconds: int) -> tuple[int, int]:
    """Count one request against a fixed window.

    The first hit in a window sets the expiry, so the window starts with the
    first request rather than on a wall-clock boundary.

    Args:
        key: Window key (identifier + route).
        window_seconds: Window length.

    Returns:
        (count within the window, seconds until the window resets).
    """
    client = _get_redis()
    full_key = f"{PREFIX_RATE_LIMIT}{key}"
    async with client.pipeline(transaction=True) as pipe:
        pipe.incr(full_key)
        pipe.expire(full_key, window_seconds, nx=True)
        pipe.ttl(full_key)
        count, _, ttl = await pipe.execute()
    if ttl is None or ttl < 0:
        ttl = window_seconds
    return int(count), int(ttl)


# ============================================================
# Distributed locks
# ============================================================


async def acquire_lock(key: str, ttl: int = TTL_JOB_LOCK) -> bool:
    """Acquire a distributed lock.

    Args:
        key: Lock key (e.g., job name).
        ttl: Lock timeout in seconds.

    Returns:
        True if lock acquired, False if already locked.
    """
    lock_key = f"{PREFIX_LOCK}{key}"
    # SET NX (only if not exists) with TTL
    result = await _get_redis().set(lock_key, "1", nx=True, ex=ttl)
    return result is not None


async def release_lock(key: str) -> None:
    """Release a distributed lock."""
    await cache_delete(f"{PREFIX_LOCK}{key}")
