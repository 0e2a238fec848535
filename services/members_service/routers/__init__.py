"""Members service routers."""

from services.members_service.routers.participants import router as participants_router

__all__ = ["participants_router"]
