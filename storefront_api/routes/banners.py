"""Banner endpoints.

Store: GET /store/banners
Admin: /admin/banners CRUD + /admin/banners/config
"""

from fastapi import APIRouter, Depends, Query, Response

from storefront_api.schemas.banner import BannerCreate, BannerListResponse, BannerOut, BannerResponse, BannerUpdate
from storefront_api.services.auth import require_admin
from storefront_api.services.banners import (
    banner_config,
    create_banner,
    delete_banner,
    list_active_banners,
    list_banners,
    retrieve_banner,
    update_banner,
)
from storefront_api.stores.postgres import get_session

store_router = APIRouter()
admin_router = APIRouter(dependencies=[Depends(require_admin)])


@store_router.get("/banners", response_model=BannerListResponse)
async def get_store_banners(
    placement: str | None = Query(default=None),
    section: str | None = Query(default=None),
) -> BannerListResponse:
    """Banners currently live on the storefront."""
    async with get_session() as session:
        banners = await list_active_banners(session, placement=placement, section=section)
        return BannerListResponse(banners=[BannerOut.model_validate(b) for b in banners])


@admin_router.get("/banners", response_model=BannerListResponse)
async def get_admin_banners(
    placement: str | None = Query(default=None),
    is_active: bool | None = Query(default=None),
) -> BannerListResponse:
    async with get_session() as session:
        banners = await list_banners(session, placement=placement, is_active=is_active)
        return BannerListResponse(banners=[BannerOut.model_validate(b) for b in banners])


@admin_router.get("/banners/config")
async def get_banner_config() -> dict:
    """Placement constants with recommended image sizes."""
    return banner_config()


@admin_router.post("/banners", response_model=BannerResponse, status_code=201)
async def post_banner(body: BannerCreate) -> BannerResponse:
    async with get_session() as session:
        banner = await create_banner(session, body.to_changes())
        return BannerResponse(banner=BannerOut.model_validate(banner))


@admin_router.get("/banners/{banner_id}", response_model=BannerResponse)
async def get_banner(banner_id: str) -> BannerResponse:
    async with get_session() as session:
        banner = await retrieve_banner(session, banner_id)
        return BannerResponse(banner=BannerOut.model_validate(banner))


@admin_router.put("/banners/{banner_id}", response_model=BannerResponse)
async def put_banner(banner_id: str, body: BannerUpdate) -> BannerResponse:
    async with get_session() as session:
        banner = await update_banner(session, banner_id, body.to_changes())
        return BannerResponse(banner=BannerOut.model_validate(banner))


@admin_router.delete("/banners/{banner_id}", status_code=204)
async def remove_banner(banner_id: str) -> Response:
    async with get_session() as session:
        await delete_banner(session, banner_id)
    return Response(status_code=204)
