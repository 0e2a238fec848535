"""Wallet credit operations: milestone claims and credit-priced enrollments.

Each operation locks the participant row, checks its idempotency key, writes
a ledger row with balance snapshots and updates the balance in one unit.
"""

from typing import Optional

from fastapi import HTTPException, status
from libs.common.logging import get_logger
from services.communications_service.models import NotificationType
from services.communications_service.services.notifications import notify
from services.members_service.models import Participant
from services.members_service.services.participants import get_participant
from services.wallet_service.models import (
    CreditTransaction,
    TransactionDirection,
    TransactionType,
)
from services.wallet_service.services.milestones import Milestone
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def milestone_idempotency_key(participant_id: str, milestone_id: str) -> str:
    return f"milestone-{participant_id}-{milestone_id}"


def enrollment_purchase_key(participant_id: str, sprint_id: str) -> str:
    return f"sprint-purchase-{participant_id}-{sprint_id}"


async def _find_transaction(db: AsyncSession, idempotency_key: str) -> Optional[CreditTransaction]:
    result = await db.execute(
        select(CreditTransaction).where(CreditTransaction.idempotency_key == idempotency_key)
    )
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Milestone claim (atomic)
# ---------------------------------------------------------------------------


async def claim_milestone(
    db: AsyncSession,
    participant_id: str,
    milestone: Milestone,
    unlocked: bool,
) -> CreditTransaction:
    """Claim a milestone's reward exactly once.

    ``unlocked`` is the caller's evaluation; thresholds are not re-checked here.
    The claimed id, the balance and the ledger row commit together.
    """
    if not unlocked:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Milestone {milestone.id} is not unlocked yet",
        )

    participant = await get_participant(db, participant_id, for_update=True)
    idempotency_key = milestone_idempotency_key(participant_id, milestone.id)
    if milestone.id in (participant.claimed_milestone_ids or []) or await _find_transaction(
        db, idempotency_key
    ):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Milestone {milestone.id} has already been claimed",
        )

    balance_before = participant.wallet_balance
    balance_after = balance_before + milestone.points
    txn = CreditTransaction(
        participant_id=participant_id,
        idempotency_key=idempotency_key,
        transaction_type=TransactionType.MILESTONE_REWARD,
        direction=TransactionDirection.CREDIT,
        amount=milestone.points,
        balance_before=balance_before,
        balance_after=balance_after,
        description=f"Milestone reward: {milestone.title}",
        reference_type="milestone",
        reference_id=milestone.id,
    )
    db.add(txn)
    participant.claimed_milestone_ids = [
        *(participant.claimed_milestone_ids or []),
        milestone.id,
    ]
    participant.wallet_balance = balance_after

    await db.commit()
    logger.info(
        "Milestone %s claimed by %s, balance %d->%d",
        milestone.id,
        participant_id,
        balance_before,
        balance_after,
    )

    await notify(
        db,
        user_id=participant_id,
        type=NotificationType.MILESTONE_CLAIMED,
        title="Reward claimed",
        body=f"You earned {milestone.points} credits for '{milestone.title}'.",
        action_url="/impact/rewards",
    )
    await db.refresh(txn)
    return txn


# ---------------------------------------------------------------------------
# Debit for credit-priced sprints (joins the caller's unit of work)
# ---------------------------------------------------------------------------


async def debit_for_enrollment(
    db: AsyncSession,
    participant: Participant,
    sprint_id: str,
    amount: int,
) -> Optional[CreditTransaction]:
    """Spend credits on a sprint. Does not commit.

    ``participant`` must already be locked by the caller. Returns None for a
    zero amount or an already-recorded purchase.
    """
    if amount <= 0:
        return None
    idempotency_key = enrollment_purchase_key(participant.id, sprint_id)
    if await _find_transaction(db, idempotency_key):
        return None
    if participant.wallet_balance < amount:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=(
                f"Not enough credits. You need {amount} but have "
                f"{participant.wallet_balance}."
            ),
        )

    balance_before = participant.wallet_balance
    txn = CreditTransaction(
        participant_id=participant.id,
        idempotency_key=idempotency_key,
        transaction_type=TransactionType.SPRINT_PURCHASE,
        direction=TransactionDirection.DEBIT,
        amount=amount,
        balance_before=balance_before,
        balance_after=balance_before - amount,
        description=f"Sprint enrollment: {sprint_id}",
        reference_type="sprint",
        reference_id=sprint_id,
    )
    db.add(txn)
    participant.wallet_balance = balance_before - amount
    return txn


async def list_transactions(
    db: AsyncSession, participant_id: str, limit: int = 50
) -> list:
    result = await db.execute(
        select(CreditTransaction)
        .where(CreditTransaction.participant_id == participant_id)
        .order_by(CreditTransaction.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
