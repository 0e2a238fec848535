"""FastAPI application for the Members Service."""

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from services.members_service.routers import participants_router


def create_app() -> FastAPI:
    """Create and configure the Members Service FastAPI app."""
    app = FastAPI(
        title="Vectorise Members Service",
        version="0.1.0",
        description="Participant records.",
    )
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "members"}

    app.include_router(participants_router)

    return app


app = create_app()
