"""Storefront HTTP API package."""

from storefront.api.admin import admin_router
from storefront.api.errors import register_error_handlers
from storefront.api.routes import cart_router, order_router, product_router

ROUTERS = (product_router, cart_router, order_router, admin_router)

__all__ = [
    "ROUTERS",
    "admin_router",
    "cart_router",
    "order_router",
    "product_router",
    "register_error_handlers",
]
