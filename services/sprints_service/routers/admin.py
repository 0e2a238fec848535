"""Admin sprint review router."""

from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends
from libs.auth.dependencies import require_admin
from libs.auth.models import AdminUser
from libs.db.session import get_async_db
from services.sprints_service.models import ApprovalStatus
from services.sprints_service.schemas import (
    ApproveRequest,
    FieldDiffResponse,
    RequestFixesRequest,
    SprintDiffResponse,
    SprintEditViewResponse,
)
from services.sprints_service.services.approval import approve_sprint, request_fixes
from services.sprints_service.services.diff import diff_pending_changes
from services.sprints_service.services.sprint_store import (
    edit_view,
    get_sprint,
    list_admin_sprints,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/sprints/admin", tags=["sprints-admin"])


@router.get("/all", response_model=List[SprintEditViewResponse])
async def list_all_sprints(
    approval_status: Optional[ApprovalStatus] = None,
    admin: AdminUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return [edit_view(s) for s in await list_admin_sprints(db, approval_status)]


@router.get("/{sprint_id}/diff", response_model=SprintDiffResponse)
async def get_sprint_diff(
    sprint_id: str,
    admin: AdminUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Word-level diff of staged changes against the live content."""
    sprint = await get_sprint(db, sprint_id)
    return SprintDiffResponse(
        sprint_id=sprint.id,
        approval_status=sprint.approval_status,
        fields=[FieldDiffResponse(**asdict(d)) for d in diff_pending_changes(sprint)],
    )


@router.post("/{sprint_id}/approve", response_model=SprintEditViewResponse)
async def approve(
    sprint_id: str,
    payload: Optional[ApproveRequest] = None,
    admin: AdminUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    payload = payload or ApproveRequest()
    sprint = await approve_sprint(
        db,
        admin,
        sprint_id,
        overrides=payload.overrides.changes() if payload.overrides else None,
        expected_version=payload.expected_version,
    )
    return edit_view(sprint)


@router.post("/{sprint_id}/request-fixes", response_model=SprintEditViewResponse)
async def request_sprint_fixes(
    sprint_id: str,
    payload: RequestFixesRequest,
    admin: AdminUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    sprint = await request_fixes(
        db,
        admin,
        sprint_id,
        feedback=payload.feedback,
        expected_version=payload.expected_version,
    )
    return edit_view(sprint)
