"""Transactional email via the Resend HTTP API.

Sending never raises into the caller: missing configuration, a missing
recipient or a provider error are logged and reported as False.
"""

import logging
from html import escape
from typing import Any

import httpx

from storefront_api.services.loyalty import TIER_CONFIG
from storefront_api.settings import get_settings

logger = logging.getLogger("uvicorn.error")

RESEND_API_URL = "https://api.resend.com"

ABANDONED_CART_SUBJECT = "Таны сагсанд бүтээгдэхүүн үлдсэн байна 🛒"
TIER_UPGRADE_SUBJECT = "🎉 Зэрэг дэвшилт!"

DEFAULT_CUSTOMER_NAME = "Харилцагч"


def format_mnt(amount: float | int | None) -> str:
    return f"{round(amount or 0):,}₮".replace(",", "'")


def render_abandoned_cart(cart: dict[str, Any], cart_url: str, discount_code: str) -> str:
    rows = []
    for item in cart.get("items") or []:
        title = escape(str(item.get("title") or item.get("product_title") or ""))
        rows.append(
            f"<tr><td>{title}</td><td>x{int(item.get('quantity') or 0)}</td>"
            f"<td>{format_mnt(item.get('unit_price'))}</td></tr>"
        )
    return (
        "<html><body>"
        "<h1>Таны сагсанд бүтээгдэхүүн үлдсэн байна</h1>"
        f"<table>{''.join(rows)}</table>"
        f"<p>Нийт дүн: <strong>{format_mnt(cart.get('subtotal'))}</strong></p>"
        f"<p>Хөнгөлөлтийн код: <strong>{escape(discount_code)}</strong></p>"
        f'<p><a href="{escape(cart_url)}">Сагс руу буцах</a></p>'
        "</body></html>"
    )


def render_tier_upgrade(customer_name: str, old_tier: str, new_tier: str, points_balance: int) -> str:
    old_name = TIER_CONFIG.get(old_tier, {}).get("name", old_tier)
    new_config = TIER_CONFIG.get(new_tier, {})
    new_name = new_config.get("name", new_tier)
    benefits = "".join(f"<li>✓ {escape(benefit)}</li>" for benefit in new_config.get("benefits", []))
    return (
        "<html><body>"
        "<h1>🎉 Зэрэг дэвшилт!</h1>"
        f"<p>Сайн байна уу {escape(customer_name)},</p>"
        f"<p>Баяр хүргэе! Та <strong>{escape(old_name)}</strong> зэргээс "
        f"<strong>{escape(new_name)}</strong> зэрэгт шилжлээ! 🎊</p>"
        f"<p>Таны одоогийн оноо: <strong>{points_balance:,}</strong></p>"
        f"<p>Таны шинэ давуу талууд:</p><ul>{benefits}</ul>"
        "<p>Таны үнэнч байдалд баярлалаа!</p>"
        "</body></html>"
    )


class EmailNotifier:
    """Resend client for storefront emails."""

    def __init__(self, api_key: str | None = None, from_address: str | None = None):
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.resend_api_key
        self.from_address = from_address or settings.email_from_address
        self.store_url = settings.store_url.rstrip("/")
        self._http_client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(base_url=RESEND_API_URL, timeout=15.0)
        return self._http_client

    async def close(self) -> None:
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def send(self, to: str | None, subject: str, html: str) -> bool:
        if not self.api_key:
            logger.warning(f"[email] RESEND_API_KEY not configured, skipping {subject!r}")
            return False
        if not to:
            logger.warning(f"[email] no recipient, skipping {subject!r}")
            return False

        client = await self._get_client()
        try:
            response = await client.post(
                "/emails",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={"from": self.from_address, "to": [to], "subject": subject, "html": html},
            )
        except httpx.HTTPError as e:
            logger.error(f"[email] send failed to={to}: {e}")
            return False

        if response.status_code >= 400:
            logger.error(f"[email] send failed to={to} status={response.status_code}: {response.text[:200]}")
            return False

        logger.info(f"[email] sent {subject!r} to={to}")
        return True

    async def send_abandoned_cart(self, cart: dict[str, Any], discount_code: str) -> bool:
        html = render_abandoned_cart(cart, f"{self.store_url}/cart", discount_code)
        return await self.send(cart.get("email"), ABANDONED_CART_SUBJECT, html)

    async def send_tier_upgrade(
        self,
        email: str | None,
        customer_name: str | None,
        old_tier: str,
        new_tier: str,
        points_balance: int,
    ) -> bool:
        html = render_tier_upgrade(customer_name or DEFAULT_CUSTOMER_NAME, old_tier, new_tier, points_balance)
        return await self.send(email, TIER_UPGRADE_SUBJECT, html)


# Singleton notifier instance
_notifier: EmailNotifier | None = None


def get_email_notifier() -> EmailNotifier:
    global _notifier
    if _notifier is None:
        _notifier = EmailNotifier()
    return _notifier


async def close_email_notifier() -> None:
    global _notifier
    if _notifier is not None:
        await _notifier.close()
        _notifier = None
