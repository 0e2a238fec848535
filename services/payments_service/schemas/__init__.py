"""Payments Service schemas package."""

from services.payments_service.schemas.earnings import (  # noqa: F401
    EarningEntryResponse,
    EarningsSummaryResponse,
)

__all__ = ["EarningEntryResponse", "EarningsSummaryResponse"]
