"""Wallet Service schemas package."""

from services.wallet_service.schemas.wallet import (  # noqa: F401
    ClaimResponse,
    MilestoneResponse,
    TransactionResponse,
    WalletResponse,
)

__all__ = [
    "ClaimResponse",
    "MilestoneResponse",
    "TransactionResponse",
    "WalletResponse",
]
