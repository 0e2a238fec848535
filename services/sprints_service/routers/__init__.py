from services.sprints_service.routers.admin import router as admin_router
from services.sprints_service.routers.coach import router as coach_router
from services.sprints_service.routers.discovery import router as discovery_router

__all__ = ["admin_router", "coach_router", "discovery_router"]
