"""Trade-in service.

Pricing flow:
1. Resolve the old device model: typed model, then TAC (first 8 IMEI digits)
   via the device map, then the raw serial
2. Reject devices with failed self-checks
3. Pick the best offer for (brand, condition): longest matching keyword wins,
   then higher priority

Apply turns the estimate into a one-time fixed promotion on the cart and
records a trade-in request that is linked to the order once it is placed.
"""

import logging
import re
import secrets
import string
import time
from collections.abc import Iterable
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_api.models import TradeInDeviceMap, TradeInOffer, TradeInRequest
from storefront_api.services.commerce_client import CommerceClient, CommerceError, get_commerce_client
from storefront_api.services.errors import NotFoundError, ValidationFailedError
from storefront_api.settings import get_settings
from storefront_api.stores.postgres import utcnow

logger = logging.getLogger("uvicorn.error")

CONDITIONS = ("like_new", "good", "fair", "broken")

DEVICE_CHECKS = ("power_on", "buttons_ok", "cosmetics_ok", "face_id_touch_ok", "audio_ok")

APPLE_KEYWORDS = ("iphone", "ipad", "watch", "apple-watch", "mac", "macbook", "imac", "airpods", "airpod")

CART_METADATA_KEYS = (
    "trade_in_request_id",
    "trade_in_promo_code",
    "trade_in_estimated_amount",
    "trade_in_currency_code",
    "trade_in_serial_number",
)

OFFER_LOOKUP_LIMIT = 200
ADMIN_LIST_LIMIT = 500

REASON_NO_MODEL = "no_model_match"
REASON_CHECKS_FAILED = "device_checks_failed"
REASON_NO_OFFER = "no_offer_match"

_BASE36 = string.digits + string.ascii_uppercase


# ============================================================
# Pure helpers
# ============================================================


def normalize(value: str | None) -> str:
    return (value or "").strip().lower()


def extract_tac(serial: str | None) -> str | None:
    """First 8 digits of an IMEI-like serial, or None if there are fewer."""
    digits = re.sub(r"[^0-9]", "", serial or "")
    if len(digits) < 8:
        return None
    return digits[:8]


def find_best_offer(offers: Iterable[TradeInOffer], model_input: str) -> TradeInOffer | None:
    """Pick the offer whose keyword best matches the model input.

    Candidates are offers whose normalized keyword is contained in the
    normalized input. Longer keywords are more specific and win; ties go to
    the higher priority.
    """
    normalized_input = normalize(model_input)
    candidates = []
    for offer in offers:
        keyword = normalize(offer.model_keyword)
        if keyword and keyword in normalized_input:
            candidates.append((len(keyword), offer.priority or 0, offer))

    if not candidates:
        return None
    candidates.sort(key=lambda c: (c[0], c[1]), reverse=True)
    return candidates[0][2]


def failed_device_checks(checks: dict[str, Any] | None) -> list[str]:
    """Checks explicitly reported as failed (missing checks do not count)."""
    checks = checks or {}
    return [name for name in DEVICE_CHECKS if checks.get(name) is False]


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def make_promo_code() -> str:
    """Single-use promo code: TRADEIN-<6 random base36>-<base36 millis>."""
    random_part = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"TRADEIN-{random_part}-{_to_base36(int(time.time() * 1000))}"


def looks_like_apple(text: str | None) -> bool:
    if not text:
        return False
    value = text.lower()
    return any(keyword in value for keyword in APPLE_KEYWORDS)


# ============================================================
# Resolution & pricing
# ============================================================


async def resolve_model_keyword(
    session: AsyncSession,
    old_device_model: str | None = None,
    serial_number: str | None = None,
) -> tuple[str, str]:
    """Resolve what to match offers against.

    Returns:
        (model_input, resolved_from) where resolved_from is one of
        old_device_model, tac or serial.
    """
    model = (old_device_model or "").strip()
    if model:
        return model, "old_device_model"

    serial = (serial_number or "").strip()
    tac = extract_tac(serial)
    if tac:
        result = await session.execute(
            select(TradeInDeviceMap)
            .where(
                TradeInDeviceMap.tac_prefix == tac,
                TradeInDeviceMap.active.is_(True),
                TradeInDeviceMap.deleted_at.is_(None),
            )
            .order_by(TradeInDeviceMap.priority.desc())
            .limit(1)
        )
        mapping = result.scalar_one_or_none()
        if mapping is not None and mapping.model_keyword:
            return mapping.model_keyword, "tac"

    if serial:
        return serial, "serial"
    return "", "serial"


async def list_matching_offers(session: AsyncSession, condition: str) -> list[TradeInOffer]:
    settings = get_settings()
    result = await session.execute(
        select(TradeInOffer)
        .where(
            TradeInOffer.active.is_(True),
            TradeInOffer.deleted_at.is_(None),
            TradeInOffer.brand == settings.trade_in_brand,
            TradeInOffer.condition == condition,
        )
        .limit(OFFER_LOOKUP_LIMIT)
    )
    return list(result.scalars().all())


async def check_product_eligibility(commerce: CommerceClient, product_id: str) -> dict[str, Any]:
    """Fetch the product and require metadata.trade_in_eligible."""
    try:
        product = await commerce.retrieve_product(product_id)
    except CommerceError as e:
        if e.is_not_found:
            raise NotFoundError(f"Product {product_id} not found") from e
        raise
    metadata = product.get("metadata") or {}
    if not metadata.get("trade_in_eligible"):
        raise ValidationFailedError("This product is not eligible for trade-in")
    return product


async def estimate(
    session: AsyncSession,
    *,
    new_product_id: str,
    old_device_condition: str,
    serial_number: str,
    old_device_model: str | None = None,
    device_checks: dict[str, Any] | None = None,
    commerce: CommerceClient | None = None,
) -> dict[str, Any]:
    commerce = commerce or get_commerce_client()
    currency = get_settings().trade_in_currency_code
    await check_product_eligibility(commerce, new_product_id)

    model_input, _ = await resolve_model_keyword(session, old_device_model, serial_number)
    if not model_input:
        return {"estimated_amount": 0, "currency_code": currency, "matched": False}

    failed = failed_device_checks(device_checks)
    if failed:
        return {
            "estimated_amount": 0,
            "currency_code": currency,
            "matched": False,
            "reason": REASON_CHECKS_FAILED,
            "failed_checks": failed,
        }

    offers = await list_matching_offers(session, normalize(old_device_condition))
    best = find_best_offer(offers, model_input)
    if best is None:
        logger.info(f"[trade-in] estimate: no offer match model={model_input!r}")
        return {"estimated_amount": 0, "currency_code": currency, "matched": False}

    return {
        "estimated_amount": best.amount,
        "currency_code": best.currency_code or currency,
        "matched": True,
    }


async def _remove_cart_promo(commerce: CommerceClient, cart_id: str, promo_code: str | None) -> None:
    if not promo_code:
        return
    try:
        await commerce.remove_promotions(cart_id, [promo_code])
    except CommerceError as e:
        logger.warning(f"[trade-in] failed removing promo cart_id={cart_id} code={promo_code}: {e.message}")


async def apply(
    session: AsyncSession,
    *,
    cart_id: str,
    new_product_id: str,
    old_device_condition: str,
    serial_number: str,
    old_device_model: str | None = None,
    device_checks: dict[str, Any] | None = None,
    commerce: CommerceClient | None = None,
) -> dict[str, Any]:
    """Turn a matched estimate into a cart discount.

    Returns ``{"applied": False, "reason": ...}`` when the device cannot be
    priced. The previous trade-in promo on the cart is replaced.
    """
    commerce = commerce or get_commerce_client()
    currency = get_settings().trade_in_currency_code
    product = await check_product_eligibility(commerce, new_product_id)

    model_input, resolved_from = await resolve_model_keyword(session, old_device_model, serial_number)
    if not model_input:
        return {"applied": False, "reason": REASON_NO_MODEL}

    failed = failed_device_checks(device_checks)
    if failed:
        return {"applied": False, "reason": REASON_CHECKS_FAILED, "failed_checks": failed}

    offers = await list_matching_offers(session, normalize(old_device_condition))
    best = find_best_offer(offers, model_input)
    if best is None or not best.amount or best.amount <= 0:
        logger.info(f"[trade-in] apply: no offer match cart_id={cart_id} model={model_input!r}")
        return {"applied": False, "reason": REASON_NO_OFFER}

    amount = best.amount
    offer_currency = best.currency_code or currency

    cart = await commerce.retrieve_cart(cart_id)
    cart_metadata = dict(cart.get("metadata") or {})
    await _remove_cart_promo(commerce, cart_id, cart_metadata.get("trade_in_promo_code"))

    promo_code = make_promo_code()
    await commerce.create_promotion(
        {
            "code": promo_code,
            "type": "standard",
            "status": "active",
            "is_automatic": False,
            "limit": 1,
            "application_method": {
                "type": "fixed",
                "target_type": "order",
                "value": amount,
                "currency_code": offer_currency,
            },
        }
    )
    await commerce.add_promotions(cart_id, [promo_code])

    request = TradeInRequest(
        cart_id=cart_id,
        new_product_id=product.get("id") or new_product_id,
        new_product_handle=product.get("handle"),
        new_product_title=product.get("title"),
        old_device_model=model_input,
        old_device_condition=old_device_condition,
        serial_number=serial_number,
        estimated_amount=amount,
        currency_code=offer_currency,
        promotion_code=promo_code,
        status="applied",
        metadata_={
            "offer_id": best.id,
            "device_checks": device_checks or {},
            "failed_checks": failed,
            "serial_number": serial_number,
            "resolved_from": resolved_from,
        },
    )
    session.add(request)
    await session.flush()

    cart_metadata.update(
        {
            "trade_in_request_id": request.id,
            "trade_in_promo_code": promo_code,
            "trade_in_estimated_amount": amount,
            "trade_in_currency_code": offer_currency,
            "trade_in_serial_number": serial_number,
        }
    )
    await commerce.update_cart(cart_id, {"metadata": cart_metadata})
    updated_cart = await commerce.retrieve_cart(cart_id)

    logger.info(
        f"[trade-in] applied cart_id={cart_id} request_id={request.id} amount={amount} "
        f"resolved_from={resolved_from}"
    )
    return {
        "applied": True,
        "promotion_code": promo_code,
        "trade_in_request_id": request.id,
        "estimated_amount": amount,
        "currency_code": offer_currency,
        "cart": updated_cart,
    }


async def remove(session: AsyncSession, cart_id: str, commerce: CommerceClient | None = None) -> dict[str, Any]:
    """Drop the trade-in discount from a cart and mark its request removed."""
    commerce = commerce or get_commerce_client()
    cart = await commerce.retrieve_cart(cart_id)
    cart_metadata = dict(cart.get("metadata") or {})
    request_id = cart_metadata.get("trade_in_request_id")

    await _remove_cart_promo(commerce, cart_id, cart_metadata.get("trade_in_promo_code"))

    for key in CART_METADATA_KEYS:
        cart_metadata[key] = None
    await commerce.update_cart(cart_id, {"metadata": cart_metadata})

    if request_id:
        request = await session.get(TradeInRequest, request_id)
        if request is not None:
            request.status = "removed"
            await session.flush()

    updated_cart = await commerce.retrieve_cart(cart_id)
    logger.info(f"[trade-in] removed cart_id={cart_id} request_id={request_id}")
    return {"removed": True, "cart": updated_cart}


# ============================================================
# Lead form & order linkage
# ============================================================


async def create_request(
    session: AsyncSession,
    *,
    customer_name: str | None,
    phone: str | None,
    old_device_model: str | None,
    old_device_condition: str | None,
    note: str | None = None,
    new_product_id: str | None = None,
    new_product_handle: str | None = None,
    new_product_title: str | None = None,
) -> TradeInRequest:
    """Store a trade-in lead submitted from the product page."""
    required = (
        (customer_name, "Нэр оруулна уу"),
        (phone, "Утасны дугаар оруулна уу"),
        (old_device_model, "Хуучин төхөөрөмжийн мэдээлэл оруулна уу"),
        (old_device_condition, "Төхөөрөмжийн төлөв сонгоно уу"),
    )
    for value, message in required:
        if not value or not value.strip():
            raise ValidationFailedError(message)

    if not looks_like_apple(new_product_handle) and not looks_like_apple(new_product_title):
        raise ValidationFailedError("Трейд-ин зөвхөн Apple бүтээгдэхүүнд боломжтой")

    request = TradeInRequest(
        customer_name=customer_name.strip(),
        phone=phone.strip(),
        old_device_model=old_device_model.strip(),
        old_device_condition=old_device_condition.strip(),
        note=note.strip() if note and note.strip() else None,
        new_product_id=new_product_id,
        new_product_handle=new_product_handle,
        new_product_title=new_product_title,
        currency_code=get_settings().trade_in_currency_code,
        status="new",
    )
    session.add(request)
    await session.flush()
    logger.info(f"[trade-in] lead created id={request.id}")
    return request


async def link_order(session: AsyncSession, order_id: str, cart: dict[str, Any]) -> TradeInRequest | None:
    """Attach a placed order to the trade-in request recorded on its cart."""
    request_id = (cart.get("metadata") or {}).get("trade_in_request_id")
    if not request_id:
        return None

    request = await session.get(TradeInRequest, request_id)
    if request is None:
        logger.warning(f"[trade-in] request {request_id} referenced by order {order_id} not found")
        return None

    request.order_id = order_id
    request.status = "ordered"
    await session.flush()
    logger.info(f"[trade-in] linked request_id={request_id} order_id={order_id}")
    return request


# ============================================================
# Admin
# ============================================================


async def list_offers(session: AsyncSession) -> list[TradeInOffer]:
    result = await session.execute(
        select(TradeInOffer)
        .where(TradeInOffer.deleted_at.is_(None))
        .order_by(TradeInOffer.priority.desc(), TradeInOffer.created_at.desc())
        .limit(ADMIN_LIST_LIMIT)
    )
    return list(result.scalars().all())


async def create_offer(session: AsyncSession, data: dict[str, Any]) -> TradeInOffer:
    model_keyword = (data.get("model_keyword") or "").strip()
    condition = normalize(data.get("condition"))
    amount = data.get("amount")
    if not model_keyword or not condition or isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise ValidationFailedError("model_keyword, condition and numeric amount are required")
    if condition not in CONDITIONS:
        raise ValidationFailedError(f"Invalid condition: {condition}", detail={"allowed": list(CONDITIONS)})

    settings = get_settings()
    offer = TradeInOffer(
        brand=data.get("brand") or settings.trade_in_brand,
        device_type=data.get("device_type"),
        model_keyword=model_keyword,
        condition=condition,
        amount=float(amount),
        currency_code=data.get("currency_code") or settings.trade_in_currency_code,
        active=data.get("active", True),
        priority=int(data.get("priority") or 0),
        metadata_=data.get("metadata"),
    )
    session.add(offer)
    await session.flush()
    logger.info(f"[trade-in] offer created id={offer.id} keyword={model_keyword!r} condition={condition}")
    return offer


async def delete_offer(session: AsyncSession, offer_id: str) -> None:
    offer = await session.get(TradeInOffer, offer_id)
    if offer is None or offer.deleted_at is not None:
        raise NotFoundError(f"Trade-in offer {offer_id} not found")
    offer.deleted_at = utcnow()
    await session.flush()


async def list_device_map(session: AsyncSession, tac_prefix: str | None = None) -> list[TradeInDeviceMap]:
    query = select(TradeInDeviceMap).where(TradeInDeviceMap.deleted_at.is_(None))
    if tac_prefix:
        query = query.where(TradeInDeviceMap.tac_prefix == tac_prefix)
    result = await session.execute(
        query.order_by(TradeInDeviceMap.tac_prefix.asc(), TradeInDeviceMap.priority.desc()).limit(ADMIN_LIST_LIMIT)
    )
    return list(result.scalars().all())


async def create_device_map(session: AsyncSession, data: dict[str, Any]) -> TradeInDeviceMap:
    tac_prefix = extract_tac(data.get("tac_prefix"))
    model_keyword = (data.get("model_keyword") or "").strip()
    if not tac_prefix or not model_keyword:
        raise ValidationFailedError("tac_prefix (8 digits) and model_keyword are required")

    row = TradeInDeviceMap(
        tac_prefix=tac_prefix,
        brand=data.get("brand") or get_settings().trade_in_brand,
        device_type=data.get("device_type"),
        model_keyword=model_keyword,
        priority=int(data.get("priority") or 0),
        active=data.get("active", True),
        metadata_=data.get("metadata"),
    )
    session.add(row)
    await session.flush()
    return row
