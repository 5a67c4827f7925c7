"""Request authentication dependencies.

- Customers: ``Authorization: Bearer <jwt>`` signed with JWT_SECRET (HS256),
  customer id in the ``actor_id`` claim. Invalid tokens are treated as
  anonymous.
- Admin and hooks: ``X-Admin-Token`` equal to ADMIN_API_TOKEN.
"""

import hmac
import logging

import jwt
from fastapi import Depends, Header, HTTPException

from storefront_api.settings import get_settings

logger = logging.getLogger("uvicorn.error")

JWT_ALGORITHM = "HS256"


def unauthorized(message: str = "Unauthorized") -> HTTPException:
    return HTTPException(status_code=401, detail={"code": "UNAUTHORIZED", "message": message, "detail": None})


def decode_customer_id(authorization: str | None) -> str | None:
    """Extract the customer id from a bearer token, or None."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None

    try:
        claims = jwt.decode(token.strip(), get_settings().jwt_secret, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError as e:
        logger.info(f"[auth] rejected bearer token: {e}")
        return None

    actor_id = claims.get("actor_id")
    return str(actor_id) if actor_id else None


async def get_customer_id(authorization: str | None = Header(default=None)) -> str | None:
    return decode_customer_id(authorization)


async def require_customer(customer_id: str | None = Depends(get_customer_id)) -> str:
    if not customer_id:
        raise unauthorized()
    return customer_id


async def require_admin(x_admin_token: str | None = Header(default=None, alias="X-Admin-Token")) -> None:
    expected = get_settings().admin_api_token
    if not expected:
        raise unauthorized("Admin API is disabled")
    if not x_admin_token or not hmac.compare_digest(x_admin_token, expected):
        raise unauthorized("Invalid admin token")
