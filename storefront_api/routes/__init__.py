"""API routes."""

from fastapi import APIRouter

from storefront_api.routes import admin, banners, customer, hooks, loyalty, product_analytics, storefront, trade_in

api_router = APIRouter()

# Storefront endpoints
api_router.include_router(banners.store_router, prefix="/store", tags=["banners"])
api_router.include_router(product_analytics.store_router, prefix="/store", tags=["product-analytics"])
api_router.include_router(loyalty.router, prefix="/store", tags=["loyalty"])
api_router.include_router(trade_in.store_router, prefix="/store", tags=["trade-in"])
api_router.include_router(storefront.router, prefix="/store", tags=["storefront"])
api_router.include_router(customer.router, prefix="/store", tags=["customer"])

# Admin endpoints (X-Admin-Token)
api_router.include_router(banners.admin_router, prefix="/admin", tags=["admin"])
api_router.include_router(product_analytics.admin_router, prefix="/admin", tags=["admin"])
api_router.include_router(trade_in.admin_router, prefix="/admin", tags=["admin"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])

# Platform event hooks
api_router.include_router(hooks.router, prefix="/hooks", tags=["hooks"])
