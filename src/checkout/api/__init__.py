"""Checkout domain API package."""

from checkout.api.errors import register_error_handlers
from checkout.api.routes import admin_router, cart_router, order_router

__all__ = ["cart_router", "order_router", "admin_router", "register_error_handlers"]
