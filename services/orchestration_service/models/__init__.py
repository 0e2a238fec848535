"""Orchestration Service models package."""

from services.orchestration_service.models.core import (  # noqa: F401
    CURRENT_MAPPING_ID,
    OrchestrationMapping,
    OrchestratorLog,
)

__all__ = ["CURRENT_MAPPING_ID", "OrchestrationMapping", "OrchestratorLog"]
