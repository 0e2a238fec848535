"""FastAPI application for the Payments Service."""

from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

from libs.common.middleware import add_observability_middleware
from services.payments_service.routers import earnings_router, webhooks_router


def create_app() -> FastAPI:
    """Create and configure the Payments Service FastAPI app."""
    app = FastAPI(
        title="Vectorise Payments Service",
        version="0.1.0",
        description="Payment confirmation webhooks and coach earnings.",
    )
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "payments"}

    app.include_router(webhooks_router)
    app.include_router(earnings_router)

    return app


app = create_app()
