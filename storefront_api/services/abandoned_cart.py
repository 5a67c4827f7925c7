"""Abandoned-cart recovery.

Finds carts that were never completed, carry an email and have been idle
longer than the threshold, then sends a single recovery email with a
discount code. The send is recorded in cart metadata so a cart is emailed
at most once.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from storefront_api.services.commerce_client import CommerceClient, CommerceError, get_commerce_client
from storefront_api.services.notifications import EmailNotifier, get_email_notifier
from storefront_api.settings import get_settings
from storefront_api.stores.postgres import utcnow

logger = logging.getLogger("uvicorn.error")

JOB_NAME = "abandoned-cart-checker"
SENT_MARKER = "abandoned_email_sent_at"


@dataclass
class AbandonedCartStats:
    """Counters for one job run."""

    found: int = 0
    sent: int = 0
    skipped: int = 0
    failed: int = 0


def should_email(cart: dict[str, Any]) -> bool:
    if (cart.get("metadata") or {}).get(SENT_MARKER):
        return False
    return bool(cart.get("items"))


async def process_abandoned_carts(
    now: datetime | None = None,
    *,
    commerce: CommerceClient | None = None,
    notifier: EmailNotifier | None = None,
) -> AbandonedCartStats:
    settings = get_settings()
    commerce = commerce or get_commerce_client()
    notifier = notifier or get_email_notifier()
    now = now or utcnow()
    cutoff = now - timedelta(hours=settings.abandoned_cart_after_hours)

    carts = await commerce.list_abandoned_carts(cutoff, limit=settings.abandoned_cart_batch_size)
    stats = AbandonedCartStats(found=len(carts))
    logger.info(f"[abandoned-cart] found={stats.found} cutoff={cutoff.isoformat()}")

    for cart in carts:
        if not should_email(cart):
            stats.skipped += 1
            continue

        sent = await notifier.send_abandoned_cart(cart, settings.abandoned_cart_discount_code)
        if not sent:
            stats.failed += 1
            continue

        metadata = {**(cart.get("metadata") or {}), SENT_MARKER: now.isoformat()}
        try:
            await commerce.update_cart(cart["id"], {"metadata": metadata})
        except CommerceError as e:
            logger.error(f"[abandoned-cart] email sent but marker not saved cart_id={cart['id']}: {e.message}")
            stats.failed += 1
            continue

        stats.sent += 1
        logger.info(f"[abandoned-cart] emailed cart_id={cart['id']} to={cart.get('email')}")

    logger.info(f"[abandoned-cart] done sent={stats.sent} skipped={stats.skipped} failed={stats.failed}")
    return stats
