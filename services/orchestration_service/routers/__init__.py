from services.orchestration_service.routers.orchestration import (
    router as orchestration_router,
)

__all__ = ["orchestration_router"]
