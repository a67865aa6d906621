"""Marketplace API package."""

from marketplace.api.routes import (
    address_router,
    cart_router,
    donation_request_router,
    donation_router,
    notification_router,
    order_router,
    product_router,
    saved_product_router,
    tracking_router,
)

__all__ = [
    "address_router",
    "cart_router",
    "donation_request_router",
    "donation_router",
    "notification_router",
    "order_router",
    "product_router",
    "saved_product_router",
    "tracking_router",
]
