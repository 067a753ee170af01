"""Ordering domain API package."""

from ordering.api.errors import register_error_handlers
from ordering.api.health import health_router
from ordering.api.routes import router

__all__ = ["router", "health_router", "register_error_handlers"]
