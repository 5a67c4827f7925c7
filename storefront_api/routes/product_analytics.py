"""Product analytics endpoints: views, stats and reviews."""

from fastapi import APIRouter, Depends, Query, Request

from storefront_api.schemas.analytics import (
    AdminReviewListResponse,
    CreateReviewRequest,
    ProductStats,
    Rating,
    ReviewListResponse,
    ReviewOut,
    ReviewResponse,
    TrackViewRequest,
    TrackViewResponse,
)
from storefront_api.services.auth import get_customer_id, require_admin, require_customer
from storefront_api.services.commerce_client import get_commerce_client
from storefront_api.services.errors import ValidationFailedError
from storefront_api.services.product_analytics import (
    approve_review,
    create_review,
    customer_display_name,
    get_average_rating,
    get_current_viewers,
    get_product_reviews,
    get_recent_sales_count,
    has_purchased,
    list_reviews,
    mark_review_helpful,
    track_view,
    validate_rating,
)
from storefront_api.services.rate_limit import lenient_limit, moderate_limit
from storefront_api.stores.postgres import get_session

store_router = APIRouter()
admin_router = APIRouter(dependencies=[Depends(require_admin)])
REVIEW_PENDING_MESSAGE = "Таны үнэлгээ хянагдаж байна. Баталгаажсаны дараа харагдах болно."
REVIEW_APPROVED_MESSAGE = "Үнэлгээ баталгаажлаа"


def client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@store_router.post(
    "/product-analytics/view",
    response_model=TrackViewResponse,
    dependencies=[Depends(lenient_limit)],
)
async def post_view(
    body: TrackViewRequest,
    request: Request,
    customer_id: str | None = Depends(get_customer_id),
) -> TrackViewResponse:
    """Record a product page view and return the live viewer count."""
    if not body.product_id.strip():
        raise ValidationFailedError("product_id is required")

    async with get_session() as session:
        await track_view(
            session,
            body.product_id,
            customer_id=customer_id,
            session_id=body.session_id or request.headers.get("x-session-id"),
            ip_address=client_ip(request),
        )
        viewers = await get_current_viewers(session, body.product_id)
    return TrackViewResponse(success=True, current_viewers=viewers)


@store_router.get("/product-analytics/stats/{product_id}", response_model=ProductStats)
async def get_stats(product_id: str) -> ProductStats:
    async with get_session() as session:
        viewers = await get_current_viewers(session, product_id)
        sales = await get_recent_sales_count(session, product_id)
        rating = await get_average_rating(session, product_id)
    return ProductStats(
        product_id=product_id,
        current_viewers=viewers,
        recent_sales_24h=sales,
        rating=Rating(**rating),
    )


@store_router.get("/product-analytics/reviews/{product_id}", response_model=ReviewListResponse)
async def get_reviews(
    product_id: str,
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> ReviewListResponse:
    async with get_session() as session:
        reviews = await get_product_reviews(session, product_id, limit=limit, offset=offset)
        rating = await get_average_rating(session, product_id)
        return ReviewListResponse(
            reviews=[ReviewOut.model_validate(r) for r in reviews],
            rating=Rating(**rating),
            limit=limit,
            offset=offset,
        )


@store_router.post(
    "/product-analytics/reviews/{product_id}",
    response_model=ReviewResponse,
    dependencies=[Depends(moderate_limit)],
)
async def post_review(
    product_id: str,
    body: CreateReviewRequest,
    customer_id: str = Depends(require_customer),
) -> ReviewResponse:
    """Submit a review; it is hidden until approved."""
    validate_rating(body.rating)

    commerce = get_commerce_client()
    customer = await commerce.retrieve_customer(customer_id)
    orders = await commerce.list_customer_orders(customer_id, limit=100)

    async with get_session() as session:
        review = await create_review(
            session,
            product_id=product_id,
            customer_id=customer_id,
            customer_name=customer_display_name(customer),
            rating=body.rating,
            title=body.title,
            comment=body.comment,
            photos=body.photos,
            verified_purchase=has_purchased(orders, product_id),
        )
        return ReviewResponse(review=ReviewOut.model_validate(review), message=REVIEW_PENDING_MESSAGE)


@store_router.post(
    "/product-analytics/reviews/{review_id}/helpful",
    dependencies=[Depends(moderate_limit)],
)
async def post_review_helpful(review_id: str) -> dict:
    async with get_session() as session:
        review = await mark_review_helpful(session, review_id)
        return {"success": True, "helpful_count": review.helpful_count}


@admin_router.get("/product-analytics/reviews", response_model=AdminReviewListResponse)
async def get_admin_reviews(
    status: str = Query(default="pending", pattern="^(pending|approved|all)$"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> AdminReviewListResponse:
    async with get_session() as session:
        reviews = await list_reviews(session, status=status, limit=limit, offset=offset)
        return AdminReviewListResponse(
            reviews=[ReviewOut.model_validate(r) for r in reviews],
            count=len(reviews),
            limit=limit,
            offset=offset,
        )


@admin_router.post("/product-analytics/reviews/{review_id}/approve", response_model=ReviewResponse)
async def post_approve_review(review_id: str) -> ReviewResponse:
    async with get_session() as session:
        review = await approve_review(session, review_id)
        return ReviewResponse(review=ReviewOut.model_validate(review), message=REVIEW_APPROVED_MESSAGE)
