"""Enrollment creation and day-by-day progress."""

import copy
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from fastapi import HTTPException, status
from libs.auth.models import AdminUser, AuthUser
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.communications_service.models import Notification, NotificationType
from services.communications_service.services.notifications import (
    create_notification,
    notify,
)
from services.enrollments_service.models import (
    Enrollment,
    EnrollmentStatus,
    PaymentSource,
    enrollment_id_for,
)
from services.members_service.models import Participant
from services.members_service.services.participants import ensure_participant
from services.orchestration_service.lifecycle import OrchestrationTrigger
from services.sprints_service.models import ApprovalStatus, PricingType
from services.sprints_service.services.sprint_store import get_sprint
from services.wallet_service.services.wallet_ops import debit_for_enrollment
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

DEFAULT_SPRINT_DURATION = 7


@dataclass
class EnrollmentCommercial:
    price_paid: int = 0
    currency: Optional[str] = None
    payment_source: PaymentSource = PaymentSource.DIRECT
    referral_source: Optional[str] = None


def build_progress(duration: int) -> List[dict]:
    return [{"day": day, "completed": False} for day in range(1, duration + 1)]


def enrollment_action_url(enrollment_id: str, day: int = 1) -> str:
    return f"/participant/sprint/{enrollment_id}?day={day}"


def next_open_day(enrollment: Enrollment) -> int:
    for entry in enrollment.progress or []:
        if not entry.get("completed"):
            return entry["day"]
    return len(enrollment.progress or [])


async def get_enrollment(
    db: AsyncSession, enrollment_id: str, *, for_update: bool = False
) -> Enrollment:
    """Get an enrollment by id. Raises 404 if not found."""
    query = select(Enrollment).where(Enrollment.id == enrollment_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(query)
    enrollment = result.scalar_one_or_none()
    if not enrollment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Enrollment not found"
        )
    return enrollment


async def enroll_participant(
    db: AsyncSession,
    participant_id: str,
    sprint_id: str,
    commercial: Optional[EnrollmentCommercial] = None,
    *,
    commit: bool = True,
) -> Tuple[Enrollment, bool]:
    """Enroll a participant in a sprint. Returns ``(enrollment, created)``.

    Idempotent: a repeat call returns the existing record untouched. The
    enrollment row, its progress array and the participant's enrolled id list
    are written in one unit. With ``commit=False`` the caller commits.
    """
    enrollment_id = enrollment_id_for(participant_id, sprint_id)
    existing = await db.get(Enrollment, enrollment_id)
    if existing:
        return existing, False

    sprint = await get_sprint(db, sprint_id, include_deleted=True)
    if sprint.deleted or sprint.approval_status == ApprovalStatus.ARCHIVED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Sprint is no longer open for enrollment",
        )
    if not sprint.published:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Sprint is not published"
        )

    commercial = commercial or EnrollmentCommercial()
    participant = await ensure_participant(db, participant_id, for_update=True)

    enrollment = Enrollment(
        id=enrollment_id,
        sprint_id=sprint.id,
        participant_id=participant_id,
        coach_id=sprint.coach_id,
        status=EnrollmentStatus.ACTIVE,
        price_paid=commercial.price_paid,
        currency=commercial.currency or get_settings().DEFAULT_CURRENCY,
        payment_source=commercial.payment_source,
        referral_source=commercial.referral_source,
        progress=build_progress(sprint.duration or DEFAULT_SPRINT_DURATION),
        sent_nudges=[],
    )
    db.add(enrollment)
    if sprint.id not in (participant.enrolled_sprint_ids or []):
        participant.enrolled_sprint_ids = [*(participant.enrolled_sprint_ids or []), sprint.id]

    if not commit:
        await db.flush()
        return enrollment, True

    try:
        await db.commit()
    except IntegrityError:
        # A concurrent request created the same enrollment first
        await db.rollback()
        existing = await db.get(Enrollment, enrollment_id)
        if existing:
            return existing, False
        raise
    await db.refresh(enrollment)
    logger.info(
        "Enrolled %s in sprint %s (source=%s)",
        participant_id,
        sprint.id,
        commercial.payment_source.value,
    )
    return enrollment, True


def completion_trigger(
    total_finished: int, is_paid: bool
) -> Optional[OrchestrationTrigger]:
    """Orchestration trigger for a participant's Nth finished sprint."""
    if total_finished == 1:
        return (
            OrchestrationTrigger.AFTER_1_PAID_SPRINT
            if is_paid
            else OrchestrationTrigger.AFTER_1_SPRINT
        )
    if total_finished == 2:
        return (
            OrchestrationTrigger.AFTER_2_PAID_SPRINTS
            if is_paid
            else OrchestrationTrigger.AFTER_2_SPRINTS
        )
    if total_finished == 3:
        return OrchestrationTrigger.AFTER_3_SPRINTS
    return None


async def complete_day(
    db: AsyncSession,
    participant_id: str,
    enrollment_id: str,
    day: int,
    *,
    submission: Optional[str] = None,
    submission_file_url: Optional[str] = None,
    reflection: Optional[str] = None,
    proof_selection: Optional[List[str]] = None,
) -> Tuple[Enrollment, Optional[OrchestrationTrigger]]:
    """Mark a day complete and record its submission.

    Days are never removed and a completed day stays completed. Returns the
    orchestration trigger when this completion finishes the sprint.
    """
    enrollment = await get_enrollment(db, enrollment_id, for_update=True)
    if enrollment.participant_id != participant_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this enrollment",
        )

    progress = copy.deepcopy(enrollment.progress or [])
    entry = next((p for p in progress if p.get("day") == day), None)
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Day {day} not found"
        )

    now = utc_now()
    if not entry.get("completed"):
        entry["completed"] = True
        entry["completed_at"] = now.isoformat()
    if submission is not None:
        entry["submission"] = submission.strip()
    if submission_file_url is not None:
        entry["submission_file_url"] = submission_file_url
    if reflection is not None:
        entry["reflection"] = reflection.strip()
    if proof_selection is not None:
        entry["proof_selection"] = list(proof_selection)

    enrollment.progress = progress
    enrollment.last_activity_at = now
    if enrollment.status == EnrollmentStatus.PAUSED:
        enrollment.status = EnrollmentStatus.ACTIVE

    just_finished = (
        enrollment.status != EnrollmentStatus.COMPLETED
        and all(p.get("completed") for p in progress)
    )
    if just_finished:
        enrollment.status = EnrollmentStatus.COMPLETED
        enrollment.completed_at = now

    await db.commit()
    logger.info("Enrollment %s: day %d complete", enrollment.id, day)

    trigger = None
    if just_finished:
        finished = await list_participant_enrollments(
            db, participant_id, status_filter=EnrollmentStatus.COMPLETED
        )
        sprint = await get_sprint(db, enrollment.sprint_id, include_deleted=True)
        trigger = completion_trigger(len(finished), (sprint.price or 0) > 0)
        logger.info(
            "Enrollment %s completed (trigger=%s)",
            enrollment.id,
            trigger.value if trigger else None,
        )
        await notify(
            db,
            user_id=participant_id,
            type=NotificationType.SPRINT_COMPLETED,
            title="Sprint complete",
            body=f'You finished "{sprint.title}". Your next step is ready.',
            action_url="/discover",
        )
    await db.refresh(enrollment)
    return enrollment, trigger


async def list_participant_enrollments(
    db: AsyncSession,
    participant_id: str,
    *,
    status_filter: Optional[EnrollmentStatus] = None,
) -> List[Enrollment]:
    query = select(Enrollment).where(Enrollment.participant_id == participant_id)
    if status_filter is not None:
        query = query.where(Enrollment.status == status_filter)
    result = await db.execute(query.order_by(Enrollment.start_date.desc()))
    return list(result.scalars().all())


async def list_enrollments_for_sprints(
    db: AsyncSession, sprint_ids: Sequence[str]
) -> List[Enrollment]:
    if not sprint_ids:
        return []
    result = await db.execute(
        select(Enrollment)
        .where(Enrollment.sprint_id.in_(list(sprint_ids)))
        .order_by(Enrollment.start_date.desc())
    )
    return list(result.scalars().all())


async def post_coach_feedback(
    db: AsyncSession,
    actor: AuthUser,
    enrollment_id: str,
    day: int,
    message: str,
) -> Notification:
    """Send the sprint's coach feedback on one day to the participant."""
    enrollment = await get_enrollment(db, enrollment_id)
    if not isinstance(actor, AdminUser) and enrollment.coach_id != actor.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the sprint's coach can leave feedback",
        )
    if not any(p.get("day") == day for p in enrollment.progress or []):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Day {day} not found"
        )
    message = message.strip()
    if not message:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Feedback cannot be empty",
        )

    notification = await create_notification(
        db,
        user_id=enrollment.participant_id,
        type=NotificationType.COACH_FEEDBACK,
        title=f"Coach feedback on day {day}",
        body=message,
        action_url=enrollment_action_url(enrollment.id, day),
    )
    logger.info("Coach %s left feedback on %s day %d", actor.user_id, enrollment.id, day)
    return notification


async def enroll_self(
    db: AsyncSession, participant_id: str, sprint_id: str
) -> Tuple[Enrollment, bool]:
    """Participant-initiated enrollment for free or credit-priced sprints.

    Cash-priced sprints are enrolled through the payment webhook instead.
    """
    existing = await db.get(Enrollment, enrollment_id_for(participant_id, sprint_id))
    if existing:
        return existing, False

    sprint = await get_sprint(db, sprint_id)
    if sprint.pricing_type == PricingType.CREDITS.value and sprint.point_cost > 0:
        enrollment, created = await enroll_participant(
            db,
            participant_id,
            sprint_id,
            EnrollmentCommercial(payment_source=PaymentSource.COIN),
            commit=False,
        )
        participant = await db.get(Participant, participant_id)
        await debit_for_enrollment(db, participant, sprint.id, sprint.point_cost)
        await db.commit()
        await db.refresh(enrollment)
        logger.info(
            "Enrolled %s in sprint %s for %d credits",
            participant_id,
            sprint.id,
            sprint.point_cost,
        )
        return enrollment, created

    if sprint.price > 0:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="This sprint requires payment",
        )
    return await enroll_participant(db, participant_id, sprint_id)
