"""Enum definitions for sprints service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class ApprovalStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    ARCHIVED = "archived"


class SprintDifficulty(str, enum.Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class PricingType(str, enum.Enum):
    CASH = "cash"
    CREDITS = "credits"


class EditMode(str, enum.Enum):
    """How a save was applied."""

    DIRECT = "direct"
    STAGED = "staged"
    AUTO_PUBLISHED = "auto_published"
