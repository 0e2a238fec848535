"""Lifecycle orchestration router."""

from typing import List, Optional

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user, require_admin, require_participant
from libs.auth.models import AdminUser, AuthUser
from libs.db.session import get_async_db
from services.orchestration_service.lifecycle import (
    STAGE_DESCRIPTIONS,
    OrchestrationConfig,
    default_config,
)
from services.orchestration_service.models import OrchestrationMapping
from services.orchestration_service.schemas import (
    EligibleSprintResponse,
    OrchestrationResponse,
    OrchestrationSaveRequest,
    ResolveRequest,
    ResolveResponse,
    SlotAssignmentSchema,
    SlotAssignRequest,
    SlotResponse,
)
from services.orchestration_service.services.registry import (
    OrchestrationRegistry,
    SlotAssignment,
    parse_assignments,
)
from services.sprints_service.services.sprint_store import list_orchestration_candidates
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/orchestration", tags=["orchestration"])


def get_orchestration_config() -> OrchestrationConfig:
    return default_config()


def get_registry(
    db: AsyncSession = Depends(get_async_db),
    config: OrchestrationConfig = Depends(get_orchestration_config),
) -> OrchestrationRegistry:
    return OrchestrationRegistry(db, config)


def _mapping_response(mapping: OrchestrationMapping) -> OrchestrationResponse:
    return OrchestrationResponse(
        version=mapping.version,
        assignments={
            slot_id: SlotAssignmentSchema(**a.to_json())
            for slot_id, a in parse_assignments(mapping.assignments).items()
        },
        updated_by=mapping.updated_by,
        updated_at=mapping.updated_at,
    )


@router.get("", response_model=OrchestrationResponse)
async def get_orchestration(
    current_user: AuthUser = Depends(get_current_user),
    registry: OrchestrationRegistry = Depends(get_registry),
):
    assignments = await registry.get_orchestration()
    return OrchestrationResponse(
        version=await registry.get_version(),
        assignments={
            slot_id: SlotAssignmentSchema(**a.to_json()) for slot_id, a in assignments.items()
        },
    )


@router.put("", response_model=OrchestrationResponse)
async def save_orchestration(
    payload: OrchestrationSaveRequest,
    admin: AdminUser = Depends(require_admin),
    registry: OrchestrationRegistry = Depends(get_registry),
):
    """Replace the whole mapping."""
    mapping = await registry.save(
        {
            slot_id: SlotAssignment(a.sprint_id, list(a.focus_criteria))
            for slot_id, a in payload.assignments.items()
        },
        admin,
        expected_version=payload.expected_version,
    )
    return _mapping_response(mapping)


@router.get("/slots", response_model=List[SlotResponse])
async def list_slots(
    current_user: AuthUser = Depends(get_current_user),
    registry: OrchestrationRegistry = Depends(get_registry),
):
    assignments = await registry.get_orchestration()
    slots = []
    for slot in registry.config.slots:
        assignment = assignments.get(slot.id)
        slots.append(
            SlotResponse(
                id=slot.id,
                stage=slot.stage,
                stage_description=STAGE_DESCRIPTIONS.get(slot.stage, ""),
                name=slot.name,
                slot_type=slot.slot_type,
                required_category=slot.required_category,
                focus_options=list(registry.config.focus_options_for(slot.stage)),
                assignment=SlotAssignmentSchema(**assignment.to_json()) if assignment else None,
            )
        )
    return slots


@router.put("/slots/{slot_id}", response_model=OrchestrationResponse)
async def assign_slot(
    slot_id: str,
    payload: SlotAssignRequest,
    admin: AdminUser = Depends(require_admin),
    registry: OrchestrationRegistry = Depends(get_registry),
):
    mapping = await registry.assign(
        slot_id,
        payload.sprint_id,
        payload.focus_criteria,
        admin,
        expected_version=payload.expected_version,
    )
    return _mapping_response(mapping)


@router.get("/slots/{slot_id}/eligible", response_model=List[EligibleSprintResponse])
async def eligible_sprints(
    slot_id: str,
    admin: AdminUser = Depends(require_admin),
    registry: OrchestrationRegistry = Depends(get_registry),
    db: AsyncSession = Depends(get_async_db),
):
    registry.require_slot(slot_id)
    assignments = await registry.get_orchestration()
    candidates = await list_orchestration_candidates(db)
    current = assignments.get(slot_id)
    occupant_id = current.sprint_id if current else None
    return [
        EligibleSprintResponse(
            id=sprint.id,
            coach_id=sprint.coach_id,
            title=sprint.title,
            category=sprint.category,
            approval_status=sprint.approval_status,
            published=sprint.published,
            is_current=sprint.id == occupant_id,
        )
        for sprint in registry.eligible_sprints(slot_id, candidates, assignments)
    ]


@router.post("/resolve", response_model=Optional[ResolveResponse])
async def resolve_sprint(
    payload: ResolveRequest,
    current_user: AuthUser = Depends(require_participant),
    registry: OrchestrationRegistry = Depends(get_registry),
):
    """Resolve the sprint a participant should be offered for a stage and focus."""
    return await registry.resolve_for_focus(
        current_user.user_id, payload.stage, payload.focus, payload.trigger
    )
