"""Participant-facing wallet and milestone routes."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import require_permission
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.enrollments_service.services.progress import list_participant_enrollments
from services.members_service.services.participants import ensure_participant
from services.wallet_service.schemas import (
    ClaimResponse,
    MilestoneResponse,
    TransactionResponse,
    WalletResponse,
)
from services.wallet_service.services.milestones import (
    DEFAULT_MILESTONES,
    MilestoneStatus,
    compute_counters,
    evaluate_milestones,
    find_milestone,
)
from services.wallet_service.services.wallet_ops import claim_milestone, list_transactions
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/wallet", tags=["wallet"])


async def _milestone_statuses(db: AsyncSession, user: AuthUser) -> List[MilestoneStatus]:
    participant = await ensure_participant(
        db, user.user_id, email=user.email, display_name=user.name
    )
    enrollments = await list_participant_enrollments(db, user.user_id)
    counters = compute_counters(participant, enrollments)
    return evaluate_milestones(
        DEFAULT_MILESTONES, counters, participant.claimed_milestone_ids
    )


def _to_response(item: MilestoneStatus) -> MilestoneResponse:
    m = item.milestone
    return MilestoneResponse(
        id=m.id,
        title=m.title,
        description=m.description,
        metric=m.metric,
        target=m.target,
        points=m.points,
        current=item.current,
        unlocked=item.unlocked,
        claimed=item.claimed,
        claimable=item.claimable,
    )


@router.get("/milestones", response_model=List[MilestoneResponse])
async def get_milestones(
    current_user: AuthUser = Depends(require_permission("milestone:claim")),
    db: AsyncSession = Depends(get_async_db),
):
    statuses = await _milestone_statuses(db, current_user)
    await db.commit()
    return [_to_response(item) for item in statuses]


@router.post("/milestones/{milestone_id}/claim", response_model=ClaimResponse)
async def claim(
    milestone_id: str,
    current_user: AuthUser = Depends(require_permission("milestone:claim")),
    db: AsyncSession = Depends(get_async_db),
):
    """Evaluate the milestone now, then claim its reward."""
    milestone = find_milestone(milestone_id)
    if not milestone:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Milestone not found"
        )
    statuses = await _milestone_statuses(db, current_user)
    await db.commit()
    unlocked = next(s.unlocked for s in statuses if s.milestone.id == milestone.id)

    txn = await claim_milestone(db, current_user.user_id, milestone, unlocked)
    return ClaimResponse(
        milestone_id=milestone.id,
        points=milestone.points,
        wallet_balance=txn.balance_after,
        transaction=TransactionResponse.model_validate(txn),
    )


@router.get("/me", response_model=WalletResponse)
async def get_my_wallet(
    current_user: AuthUser = Depends(require_permission("milestone:claim")),
    db: AsyncSession = Depends(get_async_db),
):
    participant = await ensure_participant(
        db, current_user.user_id, email=current_user.email, display_name=current_user.name
    )
    await db.commit()
    transactions = await list_transactions(db, participant.id)
    return WalletResponse(
        participant_id=participant.id,
        wallet_balance=participant.wallet_balance,
        claimed_milestone_ids=list(participant.claimed_milestone_ids or []),
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
    )
