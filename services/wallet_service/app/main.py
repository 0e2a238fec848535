"""FastAPI application for the Wallet Service."""

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from services.wallet_service.routers import wallet_router


def create_app() -> FastAPI:
    """Create and configure the Wallet Service FastAPI app."""
    app = FastAPI(
        title="Vectorise Wallet Service",
        version="0.1.0",
        description="Growth credits, milestone rewards and the credit ledger.",
    )
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "wallet"}

    app.include_router(wallet_router)

    return app


app = create_app()
