"""FastAPI application for the Communications Service."""

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from services.communications_service.routers import notifications_router


def create_app() -> FastAPI:
    """Create and configure the Communications Service FastAPI app."""
    app = FastAPI(
        title="Vectorise Communications Service",
        version="0.1.0",
        description="In-app notification feed.",
    )
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "communications"}

    app.include_router(notifications_router)

    return app


app = create_app()
