"""FastAPI application for the Sprints Service."""

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from services.sprints_service.routers import admin_router, coach_router, discovery_router


def create_app() -> FastAPI:
    """Create and configure the Sprints Service FastAPI app."""
    app = FastAPI(
        title="Vectorise Sprints Service",
        version="0.1.0",
        description="Sprint authoring, review and discovery.",
    )
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "sprints"}

    # Static paths first so they are not captured by /sprints/{sprint_id}
    app.include_router(admin_router)
    app.include_router(discovery_router)
    app.include_router(coach_router)

    return app


app = create_app()
