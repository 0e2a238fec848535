"""Enum definitions for enrollments service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class EnrollmentStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"


class PaymentSource(str, enum.Enum):
    DIRECT = "direct"
    INFLUENCER = "influencer"
    COIN = "coin"
