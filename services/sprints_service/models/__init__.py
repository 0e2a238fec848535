"""Sprints Service models package."""

from services.sprints_service.models.enums import (  # noqa: F401
    ApprovalStatus,
    EditMode,
    PricingType,
    SprintDifficulty,
)
from services.sprints_service.models.sprint import Sprint, generate_sprint_id  # noqa: F401

__all__ = [
    "ApprovalStatus",
    "EditMode",
    "PricingType",
    "Sprint",
    "SprintDifficulty",
    "generate_sprint_id",
]
