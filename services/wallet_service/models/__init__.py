"""Wallet Service models package."""

from services.wallet_service.models.enums import (  # noqa: F401
    TransactionDirection,
    TransactionType,
)
from services.wallet_service.models.transaction import CreditTransaction  # noqa: F401

__all__ = ["CreditTransaction", "TransactionDirection", "TransactionType"]
