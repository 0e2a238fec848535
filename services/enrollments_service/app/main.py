"""FastAPI application for the Enrollments Service."""

from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

from libs.common.middleware import add_observability_middleware
from services.enrollments_service.routers import enrollments_router


def create_app() -> FastAPI:
    """Create and configure the Enrollments Service FastAPI app."""
    app = FastAPI(
        title="Vectorise Enrollments Service",
        version="0.1.0",
        description="Sprint enrollments and daily progress.",
    )
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "enrollments"}

    app.include_router(enrollments_router)

    return app


app = create_app()
