"""Drop-off nudges for participants who have gone quiet."""

from datetime import datetime
from typing import Optional, Sequence

from libs.common.datetime_utils import utc_now, whole_days_between
from libs.common.logging import get_logger
from services.communications_service.models import NotificationType
from services.communications_service.services.notifications import create_notification
from services.enrollments_service.models import Enrollment, EnrollmentStatus
from services.enrollments_service.services.progress import (
    enrollment_action_url,
    next_open_day,
)
from services.sprints_service.services.sprint_store import list_sprints_by_ids
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

NUDGE_THRESHOLDS = (1, 2, 4, 7, 10, 15)

NUDGE_TEMPLATES = {
    1: "Missing your momentum? Day {day} is waiting for you in '{title}'.",
    2: "Your growth cycle is stalling. Let's get back to it and finish Day {day} of '{title}'.",
    4: "Consistency is the only bridge to mastery. Resume '{title}' now to stay on track.",
    7: "It's been a week since your last win. Re-ignite your spark in '{title}' before it fades.",
    10: "The path is still there. One small win today changes everything for your '{title}' journey.",
    15: "Your '{title}' sprint is at high risk of abandonment. Your future self is counting on you to finish.",
}


def nudge_threshold(days_inactive: int, thresholds: Sequence[int] = NUDGE_THRESHOLDS) -> Optional[int]:
    """Highest threshold reached, or None below the first one."""
    reached = [t for t in thresholds if days_inactive >= t]
    return max(reached) if reached else None


async def send_dropoff_nudges(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """Nudge each active enrollment at most once per inactivity threshold.

    The notification and the ``sent_nudges`` update commit together.
    Returns the number of nudges sent.
    """
    now = now or utc_now()
    result = await db.execute(
        select(Enrollment).where(Enrollment.status == EnrollmentStatus.ACTIVE)
    )
    enrollments = list(result.scalars().all())
    if not enrollments:
        return 0

    sprints = {
        s.id: s
        for s in await list_sprints_by_ids(db, list({e.sprint_id for e in enrollments}))
    }

    # Resolve every nudge up front: a rollback below expires loaded rows
    due = []
    for enrollment in enrollments:
        threshold = nudge_threshold(whole_days_between(enrollment.last_activity_at, now))
        if threshold is None or threshold in (enrollment.sent_nudges or []):
            continue
        sprint = sprints.get(enrollment.sprint_id)
        if sprint is None:
            continue
        day = next_open_day(enrollment)
        due.append(
            (
                enrollment.id,
                enrollment.participant_id,
                threshold,
                day,
                NUDGE_TEMPLATES[threshold].format(day=day, title=sprint.title),
            )
        )

    sent = 0
    for enrollment_id, participant_id, threshold, day, message in due:
        try:
            await create_notification(
                db,
                user_id=participant_id,
                type=NotificationType.SPRINT_NUDGE,
                title="Keep your sprint going",
                body=message,
                action_url=enrollment_action_url(enrollment_id, day),
                commit=False,
            )
            enrollment = await db.get(Enrollment, enrollment_id, populate_existing=True)
            enrollment.sent_nudges = [*(enrollment.sent_nudges or []), threshold]
            await db.commit()
            sent += 1
        except Exception as e:
            await db.rollback()
            logger.error("Failed to nudge enrollment %s: %s", enrollment_id, e)

    logger.info("Sent %d drop-off nudges", sent)
    return sent
