"""Bakery back office API package."""

from bakery.api.errors import register_error_handlers
from bakery.api.routes import catalogue_router, customer_router, order_router, payment_router

__all__ = ["order_router", "payment_router", "customer_router", "catalogue_router", "register_error_handlers"]
