"""Platform event subscribers.

The platform forwards events to POST /hooks/events. Handlers registered for
an event name run one after another, each in its own DB session, so one
failing handler never affects the others.

order.placed:
- award_loyalty_points: credit points for the order total (idempotent per order)
- track_product_sales: one sale row per line item
- link_trade_in_order: mark the cart's trade-in request as ordered
"""

import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

from storefront_api.services import loyalty, product_analytics, trade_in
from storefront_api.services.commerce_client import CommerceClient, get_commerce_client
from storefront_api.services.notifications import EmailNotifier, get_email_notifier
from storefront_api.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

ORDER_PLACED = "order.placed"

Handler = Callable[..., Awaitable[None]]

_subscribers: dict[str, list[Handler]] = defaultdict(list)


def subscriber(event_name: str) -> Callable[[Handler], Handler]:
    """Register a handler for an event name."""

    def decorator(handler: Handler) -> Handler:
        _subscribers[event_name].append(handler)
        return handler

    return decorator


def get_subscribers(event_name: str) -> list[Handler]:
    return list(_subscribers.get(event_name, []))


async def dispatch_event(
    event_name: str,
    data: dict[str, Any],
    *,
    commerce: CommerceClient | None = None,
    notifier: EmailNotifier | None = None,
) -> int:
    """Run every handler for the event.

    Returns:
        Number of handlers invoked.
    """
    commerce = commerce or get_commerce_client()
    notifier = notifier or get_email_notifier()
    handlers = get_subscribers(event_name)
    for handler in handlers:
        try:
            await handler(data, commerce=commerce, notifier=notifier)
        except Exception:
            logger.exception(f"[events] {event_name} handler {handler.__name__} failed data={data}")
    if not handlers:
        logger.info(f"[events] no subscribers for {event_name}")
    return len(handlers)


# ============================================================
# order.placed
# ============================================================


@subscriber(ORDER_PLACED)
async def award_loyalty_points(data: dict[str, Any], *, commerce: CommerceClient, notifier: EmailNotifier) -> None:
    order = await commerce.retrieve_order(data["id"])
    if not order:
        logger.warning(f"[loyalty] order {data['id']} not found")
        return

    customer_id = order.get("customer_id")
    if not customer_id:
        logger.info(f"[loyalty] order {order.get('display_id')} has no customer, skipping")
        return

    async with get_session() as session:
        account = await loyalty.get_or_create_account(session, customer_id)
        points = loyalty.calculate_points_for_amount(order.get("total") or 0, account.tier)
        if points <= 0:
            logger.info(f"[loyalty] order {order.get('display_id')} total={order.get('total')} gives 0 points")
            return

        result = await loyalty.award_points(
            session,
            customer_id,
            points,
            reason="purchase",
            order_id=order["id"],
            metadata={"order_display_id": order.get("display_id"), "order_total": order.get("total")},
        )
        balance = result.account.points_balance
        new_tier = result.account.tier

    if result.already_processed:
        logger.info(f"[loyalty] order {order['id']} already awarded")
        return

    logger.info(
        f"[loyalty] awarded points={points} customer_id={customer_id} order={order.get('display_id')} "
        f"balance={balance} upgraded={result.tier_upgraded}"
    )
    if result.tier_upgraded:
        customer = await commerce.retrieve_customer(customer_id)
        await notifier.send_tier_upgrade(
            email=customer.get("email") or order.get("email"),
            customer_name=product_analytics.customer_display_name(customer) or None,
            old_tier=result.previous_tier or loyalty.TIER_BRONZE,
            new_tier=new_tier,
            points_balance=balance,
        )


@subscriber(ORDER_PLACED)
async def track_product_sales(data: dict[str, Any], *, commerce: CommerceClient, notifier: EmailNotifier) -> None:
    order = await commerce.retrieve_order(data["id"])
    items = order.get("items") or []
    if not items:
        return

    async with get_session() as session:
        for item in items:
            if item.get("product_id"):
                await product_analytics.track_sale(
                    session,
                    product_id=item["product_id"],
                    order_id=order["id"],
                    quantity=int(item.get("quantity") or 0),
                )
                logger.info(f"[analytics] sale product_id={item['product_id']} order_id={order['id']}")


@subscriber(ORDER_PLACED)
async def link_trade_in_order(data: dict[str, Any], *, commerce: CommerceClient, notifier: EmailNotifier) -> None:
    order = await commerce.retrieve_order(data["id"])
    cart_id = order.get("cart_id") or (order.get("cart") or {}).get("id")
    if not cart_id:
        return

    cart = await commerce.retrieve_cart(cart_id)
    async with get_session() as session:
        await trade_in.link_order(session, order["id"], cart)
