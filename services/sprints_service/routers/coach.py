"""Sprint authoring router (coach and admin)."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import get_current_user, require_coach, require_permission
from libs.auth.models import AuthUser, CoachUser
from libs.db.session import get_async_db
from services.sprints_service.schemas import (
    SprintCreate,
    SprintEditRequest,
    SprintEditViewResponse,
    SprintSaveResponse,
)
from services.sprints_service.services.approval import save_sprint_edits, submit_for_review
from services.sprints_service.services.sprint_store import (
    archive_sprint,
    can_manage,
    create_sprint,
    edit_view,
    get_sprint,
    list_coach_sprints,
    live_view,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/sprints", tags=["sprints"])


@router.post("", response_model=SprintEditViewResponse, status_code=status.HTTP_201_CREATED)
async def create_new_sprint(
    payload: SprintCreate,
    current_user: AuthUser = Depends(require_permission("sprint:create")),
    db: AsyncSession = Depends(get_async_db),
):
    sprint = await create_sprint(db, current_user, payload)
    return edit_view(sprint)


@router.get("/mine", response_model=List[SprintEditViewResponse])
async def list_my_sprints(
    current_user: CoachUser = Depends(require_coach),
    db: AsyncSession = Depends(get_async_db),
):
    return [edit_view(s) for s in await list_coach_sprints(db, current_user.user_id)]


@router.get("/{sprint_id}", response_model=SprintEditViewResponse)
async def get_sprint_detail(
    sprint_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Edit view for the owner and admins; the live view for everyone else."""
    sprint = await get_sprint(db, sprint_id)
    if can_manage(current_user, sprint):
        return edit_view(sprint)
    if not sprint.published:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sprint not found")
    return live_view(sprint)


@router.patch("/{sprint_id}", response_model=SprintSaveResponse)
async def update_sprint(
    sprint_id: str,
    payload: SprintEditRequest,
    current_user: AuthUser = Depends(require_permission("sprint:edit")),
    db: AsyncSession = Depends(get_async_db),
):
    sprint, mode = await save_sprint_edits(
        db,
        current_user,
        sprint_id,
        payload.changes(),
        expected_version=payload.expected_version,
    )
    return {"mode": mode, "sprint": edit_view(sprint)}


@router.post("/{sprint_id}/submit", response_model=SprintEditViewResponse)
async def submit_sprint(
    sprint_id: str,
    current_user: AuthUser = Depends(require_permission("sprint:submit")),
    db: AsyncSession = Depends(get_async_db),
):
    sprint = await submit_for_review(db, current_user, sprint_id)
    return edit_view(sprint)


@router.delete("/{sprint_id}", response_model=SprintEditViewResponse)
async def delete_sprint(
    sprint_id: str,
    current_user: AuthUser = Depends(require_permission("sprint:edit")),
    db: AsyncSession = Depends(get_async_db),
):
    """Soft delete (archive)."""
    sprint = await archive_sprint(db, current_user, sprint_id)
    return edit_view(sprint)
