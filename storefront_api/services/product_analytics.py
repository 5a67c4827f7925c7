"""Product analytics: live viewers, recent sales and reviews.

Views and sales are append-only event rows. Counters are computed on read:
- current viewers: distinct customer/session identities over the last 5 minutes
- recent sales: sum of sold quantity over the last 24 hours

Reviews are stored unapproved and only approved reviews are public.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_api.models import ProductReview, ProductSale, ProductView
from storefront_api.services.errors import NotFoundError, ValidationFailedError
from storefront_api.stores.postgres import utcnow

logger = logging.getLogger("uvicorn.error")

VIEWER_WINDOW = timedelta(minutes=5)
SALES_WINDOW = timedelta(hours=24)

REVIEW_STATUSES = ("pending", "approved", "all")


def count_unique_viewers(rows: Iterable[tuple[str | None, str | None]]) -> int:
    """Count distinct viewer identities in (customer_id, session_id) rows.

    A signed-in customer is identified by customer_id, anyone else by
    session_id. Rows carrying neither are ignored.
    """
    identities = set()
    for customer_id, session_id in rows:
        identity = customer_id or session_id
        if identity:
            identities.add(identity)
    return len(identities)


# ============================================================
# Views & sales
# ============================================================


async def track_view(
    session: AsyncSession,
    product_id: str,
    customer_id: str | None = None,
    session_id: str | None = None,
    ip_address: str | None = None,
) -> ProductView:
    view = ProductView(
        product_id=product_id,
        customer_id=customer_id,
        session_id=session_id,
        ip_address=ip_address,
        viewed_at=utcnow(),
    )
    session.add(view)
    await session.flush()
    return view


async def get_current_viewers(session: AsyncSession, product_id: str, now: datetime | None = None) -> int:
    since = (now or utcnow()) - VIEWER_WINDOW
    result = await session.execute(
        select(ProductView.customer_id, ProductView.session_id).where(
            ProductView.product_id == product_id,
            ProductView.viewed_at >= since,
        )
    )
    return count_unique_viewers(result.all())


async def track_sale(session: AsyncSession, product_id: str, order_id: str, quantity: int) -> ProductSale:
    sale = ProductSale(product_id=product_id, order_id=order_id, quantity=quantity, sold_at=utcnow())
    session.add(sale)
    await session.flush()
    return sale


async def get_recent_sales_count(session: AsyncSession, product_id: str, now: datetime | None = None) -> int:
    since = (now or utcnow()) - SALES_WINDOW
    result = await session.execute(
        select(func.coalesce(func.sum(ProductSale.quantity), 0)).where(
            ProductSale.product_id == product_id,
            ProductSale.sold_at >= since,
        )
    )
    return int(result.scalar_one())


# ============================================================
# Reviews
# ============================================================


def validate_rating(rating: object) -> None:
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationFailedError("Rating must be between 1 and 5")


async def create_review(
    session: AsyncSession,
    *,
    product_id: str,
    customer_id: str,
    customer_name: str,
    rating: int,
    comment: str,
    title: str | None = None,
    photos: list[str] | None = None,
    verified_purchase: bool = False,
) -> ProductReview:
    """Store a new review. It stays hidden until an admin approves it."""
    validate_rating(rating)

    review = ProductReview(
        product_id=product_id,
        customer_id=customer_id,
        customer_name=customer_name,
        rating=rating,
        title=title,
        comment=comment,
        photos=photos,
        verified_purchase=verified_purchase,
        is_approved=False,
        helpful_count=0,
    )
    session.add(review)
    await session.flush()
    logger.info(f"[reviews] created id={review.id} product_id={product_id} rating={rating}")
    return review


async def get_product_reviews(
    session: AsyncSession,
    product_id: str,
    limit: int = 10,
    offset: int = 0,
) -> list[ProductReview]:
    result = await session.execute(
        select(ProductReview)
        .where(ProductReview.product_id == product_id, ProductReview.is_approved.is_(True))
        .order_by(ProductReview.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all())


async def get_average_rating(session: AsyncSession, product_id: str) -> dict[str, Any]:
    """Average over approved reviews, rounded to one decimal."""
    result = await session.execute(
        select(func.count(ProductReview.id), func.coalesce(func.sum(ProductReview.rating), 0)).where(
            ProductReview.product_id == product_id,
            ProductReview.is_approved.is_(True),
        )
    )
    count, total = result.one()
    if not count:
        return {"average": 0, "count": 0}
    # ties round up: 4.25 -> 4.3
    average = Decimal(int(total) / int(count)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return {"average": float(average), "count": int(count)}


async def approve_review(session: AsyncSession, review_id: str) -> ProductReview:
    review = await session.get(ProductReview, review_id)
    if review is None:
        raise NotFoundError(f"Review {review_id} not found")
    review.is_approved = True
    await session.flush()
    logger.info(f"[reviews] approved id={review_id}")
    return review


async def mark_review_helpful(session: AsyncSession, review_id: str) -> ProductReview:
    # Single UPDATE so concurrent clicks are never lost
    result = await session.execute(
        update(ProductReview)
        .where(ProductReview.id == review_id)
        .values(helpful_count=ProductReview.helpful_count + 1)
    )
    if result.rowcount == 0:
        raise NotFoundError(f"Review {review_id} not found")

    refreshed = await session.execute(
        select(ProductReview)
        .where(ProductReview.id == review_id)
        .execution_options(populate_existing=True)
    )
    return refreshed.scalar_one()


async def list_reviews(
    session: AsyncSession,
    status: str = "pending",
    limit: int = 50,
    offset: int = 0,
) -> list[ProductReview]:
    """Admin listing by approval status, newest first."""
    if status not in REVIEW_STATUSES:
        raise ValidationFailedError(f"Invalid status: {status}", detail={"allowed": list(REVIEW_STATUSES)})

    query = select(ProductReview)
    if status == "pending":
        query = query.where(ProductReview.is_approved.is_(False))
    elif status == "approved":
        query = query.where(ProductReview.is_approved.is_(True))

    result = await session.execute(query.order_by(ProductReview.created_at.desc()).limit(limit).offset(offset))
    return list(result.scalars().all())


# ============================================================
# Platform lookups for review creation
# ============================================================


def customer_display_name(customer: dict[str, Any]) -> str:
    """First and last name, falling back to email."""
    name = " ".join(part for part in (customer.get("first_name"), customer.get("last_name")) if part).strip()
    return name or customer.get("email") or ""


def has_purchased(orders: list[dict[str, Any]], product_id: str) -> bool:
    for order in orders:
        for item in order.get("items") or []:
            if item.get("product_id") == product_id:
                return True
    return False
