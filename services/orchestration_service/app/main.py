"""FastAPI application for the Orchestration Service."""

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from services.orchestration_service.routers import orchestration_router


def create_app() -> FastAPI:
    """Create and configure the Orchestration Service FastAPI app."""
    app = FastAPI(
        title="Vectorise Orchestration Service",
        version="0.1.0",
        description="Lifecycle slot mapping and sprint resolution.",
    )
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "orchestration"}

    app.include_router(orchestration_router)

    return app


app = create_app()
