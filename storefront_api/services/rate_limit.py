"""Fixed-window rate limiting as FastAPI dependencies.

Requests are counted in Redis per (limiter, caller, path). The caller is the
signed-in customer, else the forwarded client IP, else the socket peer.
When Redis is unavailable the request is let through.
"""

import logging

from fastapi import HTTPException, Request, Response
from redis.exceptions import RedisError

from storefront_api.services.auth import decode_customer_id
from storefront_api.settings import get_settings
from storefront_api.stores.redis import hit_rate_window

logger = logging.getLogger("uvicorn.error")

MESSAGE_TOO_MANY = "Хэт олон хүсэлт илгээлээ. Түр хүлээгээд дахин оролдоно уу."


class RateLimiter:
    """Dependency allowing ``limit`` requests per ``window_seconds``."""

    def __init__(self, name: str, limit: int, window_seconds: int, message: str = MESSAGE_TOO_MANY):
        self.name = name
        self.limit = limit
        self.window_seconds = window_seconds
        self.message = message

    def identify(self, request: Request) -> str:
        customer_id = decode_customer_id(request.headers.get("authorization"))
        if customer_id:
            return customer_id
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        if request.client:
            return request.client.host
        return "unknown"

    async def __call__(self, request: Request, response: Response) -> None:
        if not get_settings().rate_limit_enabled:
            return

        identifier = self.identify(request)
        key = f"{self.name}:{identifier}:{request.url.path}"
        try:
            count, reset_in = await hit_rate_window(key, self.window_seconds)
        except (RuntimeError, RedisError) as e:
            logger.debug(f"[rate-limit] skipped, redis unavailable: {e}")
            return

        if count > self.limit:
            logger.warning(f"[rate-limit] {self.name} exceeded by {identifier} on {request.url.path}")
            raise HTTPException(
                status_code=429,
                detail={"code": "RATE_LIMITED", "message": self.message, "detail": {"retryAfter": reset_in}},
                headers={"Retry-After": str(reset_in)},
            )

        response.headers["X-RateLimit-Limit"] = str(self.limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self.limit - count))
        response.headers["X-RateLimit-Reset"] = str(reset_in)


strict_limit = RateLimiter(
    "strict",
    limit=5,
    window_seconds=15 * 60,
    message="Хэт олон оролдлого хийлээ. 15 минутын дараа дахин оролдоно уу.",
)
moderate_limit = RateLimiter("moderate", limit=10, window_seconds=60)
lenient_limit = RateLimiter("lenient", limit=60, window_seconds=60)
search_limit = RateLimiter(
    "search",
    limit=30,
    window_seconds=60,
    message="Хайлт хэт олон удаа хийлээ. Түр хүлээгээд дахин оролдоно уу.",
)
