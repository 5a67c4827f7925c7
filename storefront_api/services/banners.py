"""Banner service.

Storefront reads only see live banners: active, not soft-deleted and inside
their optional [starts_at, ends_at] schedule window. Admin reads see all
non-deleted banners.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_api.models import Banner
from storefront_api.services.errors import NotFoundError, ValidationFailedError
from storefront_api.stores.postgres import utcnow

logger = logging.getLogger("uvicorn.error")

BANNER_PLACEMENTS = ("hero", "bento", "product_grid")

BANNER_CONFIG: dict[str, dict[str, Any]] = {
    "hero": {
        "aspect_ratio": "16/6",
        "desktop": {"width": 2200, "height": 825},
        "mobile": {"width": 1080, "height": 1080},
        "label": "Үндсэн слайд",
        "description": "Homepage carousel shown at the top of the storefront",
    },
    "bento": {
        "aspect_ratio": "16/5",
        "desktop": {"width": 1600, "height": 500},
        "mobile": {"width": 800, "height": 1067},
        "label": "Бенто баннер",
        "description": "Wide promotional strip between homepage sections",
    },
    "product_grid": {
        "aspect_ratio": "4/5",
        "desktop": {"width": 800, "height": 1000},
        "mobile": {"width": 800, "height": 1067},
        "label": "Бүтээгдэхүүний grid баннер",
        "description": "Tile placed inside a product grid section",
    },
}

REQUIRED_FIELDS = ("image_url", "link", "placement")
NOT_NULL_FIELDS = (*REQUIRED_FIELDS, "grid_size", "sort_order", "is_active", "dark_text")
UPDATABLE_FIELDS = (
    "title",
    "subtitle",
    "description",
    "image_url",
    "mobile_image_url",
    "link",
    "alt_text",
    "placement",
    "section",
    "grid_size",
    "sort_order",
    "is_active",
    "dark_text",
    "starts_at",
    "ends_at",
    "metadata_",
)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_banner_live(banner: Banner, now: datetime) -> bool:
    """Check whether a banner should be shown at ``now``.

    Open schedule bounds are ignored.
    """
    if not banner.is_active or banner.deleted_at is not None:
        return False
    now = _as_utc(now)
    if banner.starts_at is not None and _as_utc(banner.starts_at) > now:
        return False
    if banner.ends_at is not None and _as_utc(banner.ends_at) < now:
        return False
    return True


def banner_config() -> dict[str, Any]:
    return {"placements": list(BANNER_PLACEMENTS), "config": BANNER_CONFIG}


def _check_placement(placement: str) -> None:
    if placement not in BANNER_PLACEMENTS:
        raise ValidationFailedError(
            f"Invalid placement: {placement}",
            detail={"allowed": list(BANNER_PLACEMENTS)},
        )


async def list_active_banners(
    session: AsyncSession,
    placement: str | None = None,
    section: str | None = None,
    now: datetime | None = None,
) -> list[Banner]:
    """List banners live on the storefront, ordered by sort_order."""
    now = now or utcnow()
    query = select(Banner).where(Banner.is_active.is_(True), Banner.deleted_at.is_(None))
    if placement:
        query = query.where(Banner.placement == placement)
    if section:
        query = query.where(Banner.section == section)
    query = query.order_by(Banner.sort_order.asc(), Banner.created_at.asc())

    result = await session.execute(query)
    return [banner for banner in result.scalars().all() if is_banner_live(banner, now)]


async def list_banners(
    session: AsyncSession,
    placement: str | None = None,
    is_active: bool | None = None,
) -> list[Banner]:
    """List all non-deleted banners for the admin."""
    query = select(Banner).where(Banner.deleted_at.is_(None))
    if placement:
        query = query.where(Banner.placement == placement)
    if is_active is not None:
        query = query.where(Banner.is_active.is_(is_active))
    query = query.order_by(Banner.sort_order.asc(), Banner.created_at.asc())

    result = await session.execute(query)
    return list(result.scalars().all())


async def retrieve_banner(session: AsyncSession, banner_id: str) -> Banner:
    banner = await session.get(Banner, banner_id)
    if banner is None or banner.deleted_at is not None:
        raise NotFoundError(f"Banner {banner_id} not found")
    return banner


async def create_banner(session: AsyncSession, data: dict[str, Any]) -> Banner:
    missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
    if missing:
        raise ValidationFailedError("Missing required fields: image_url, link, placement")
    _check_placement(data["placement"])

    banner = Banner(**{key: value for key, value in data.items() if key in UPDATABLE_FIELDS and value is not None})
    session.add(banner)
    await session.flush()
    logger.info(f"[banners] created id={banner.id} placement={banner.placement}")
    return banner


async def update_banner(session: AsyncSession, banner_id: str, changes: dict[str, Any]) -> Banner:
    """Apply only the provided fields."""
    nulled = [key for key in NOT_NULL_FIELDS if key in changes and changes[key] is None]
    if nulled:
        raise ValidationFailedError(f"Fields cannot be null: {', '.join(nulled)}", detail={"fields": nulled})

    banner = await retrieve_banner(session, banner_id)
    if "placement" in changes:
        _check_placement(changes["placement"])

    for key, value in changes.items():
        if key in UPDATABLE_FIELDS:
            setattr(banner, key, value)
    await session.flush()
    return banner


async def delete_banner(session: AsyncSession, banner_id: str) -> None:
    banner = await retrieve_banner(session, banner_id)
    banner.deleted_at = utcnow()
    await session.flush()
    logger.info(f"[banners] deleted id={banner_id}")
