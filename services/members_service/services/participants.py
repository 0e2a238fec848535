"""Participant record lookups."""

from typing import Optional

from fastapi import HTTPException, status
from libs.common.logging import get_logger
from services.members_service.models import Participant
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def get_participant(
    db: AsyncSession, participant_id: str, *, for_update: bool = False
) -> Participant:
    """Get a participant by id. Raises 404 if not found."""
    query = select(Participant).where(Participant.id == participant_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(query)
    participant = result.scalar_one_or_none()
    if not participant:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Participant not found",
        )
    return participant


async def ensure_participant(
    db: AsyncSession,
    participant_id: str,
    *,
    email: Optional[str] = None,
    display_name: Optional[str] = None,
    for_update: bool = False,
) -> Participant:
    """Return the participant row, adding one to the session if missing.

    Idempotent. Does not commit; callers commit as part of their own unit.
    """
    query = select(Participant).where(Participant.id == participant_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(query)
    participant = result.scalar_one_or_none()
    if participant:
        return participant

    participant = Participant(
        id=participant_id,
        email=email,
        display_name=display_name,
        enrolled_sprint_ids=[],
        claimed_milestone_ids=[],
        wallet_balance=0,
    )
    db.add(participant)
    await db.flush()
    logger.info("Created participant record %s", participant_id)
    return participant
