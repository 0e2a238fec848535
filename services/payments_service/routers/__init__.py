"""Payments Service routers package."""

from services.payments_service.routers.earnings import router as earnings_router
from services.payments_service.routers.webhooks import router as webhooks_router

__all__ = ["earnings_router", "webhooks_router"]
