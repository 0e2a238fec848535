"""Payments Service models package."""

from services.payments_service.models.core import Payment  # noqa: F401
from services.payments_service.models.enums import PaymentStatus  # noqa: F401

__all__ = ["Payment", "PaymentStatus"]
