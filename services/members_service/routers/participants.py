"""Participant profile router."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import require_participant
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.members_service.schemas import ParticipantResponse
from services.members_service.services.participants import ensure_participant
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/members", tags=["members"])


@router.get("/me", response_model=ParticipantResponse)
async def get_me(
    current_user: AuthUser = Depends(require_participant),
    db: AsyncSession = Depends(get_async_db),
):
    """Current participant record, created on first access."""
    participant = await ensure_participant(
        db,
        current_user.user_id,
        email=current_user.email,
        display_name=current_user.name,
    )
    await db.commit()
    return participant
