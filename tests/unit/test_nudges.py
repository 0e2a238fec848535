"""Unit tests for drop-off nudges."""

import pytest
from libs.common.datetime_utils import utc_now
from services.communications_service.models import Notification, NotificationType
from services.enrollments_service.models import Enrollment, EnrollmentStatus
from services.enrollments_service.services.nudges import (
    nudge_threshold,
    send_dropoff_nudges,
)
from sqlalchemy import select
from tests.factories import EnrollmentFactory, SprintFactory, days_ago


@pytest.mark.unit
def test_threshold_is_highest_reached():
    assert nudge_threshold(0) is None
    assert nudge_threshold(1) == 1
    assert nudge_threshold(3) == 2
    assert nudge_threshold(9) == 7
    assert nudge_threshold(40) == 15


async def _notifications(db):
    result = await db.execute(select(Notification).order_by(Notification.created_at))
    return result.scalars().all()


@pytest.mark.asyncio
@pytest.mark.unit
async def test_quiet_enrollment_is_nudged_once_per_threshold(db_session):
    sprint = SprintFactory.live(title="Deep Work Reset")
    progress = [
        {"day": 1, "completed": True},
        {"day": 2, "completed": False},
        {"day": 3, "completed": False},
    ]
    enrollment = EnrollmentFactory.create(
        "participant-1", sprint.id, progress=progress, last_activity_at=days_ago(3)
    )
    db_session.add_all([sprint, enrollment])
    await db_session.commit()

    assert await send_dropoff_nudges(db_session, now=utc_now()) == 1
    assert await send_dropoff_nudges(db_session, now=utc_now()) == 0

    (notification,) = await _notifications(db_session)
    assert notification.type == NotificationType.SPRINT_NUDGE
    assert notification.user_id == "participant-1"
    assert "Day 2 of 'Deep Work Reset'" in notification.body
    assert notification.action_url.endswith("?day=2")

    refreshed = await db_session.get(Enrollment, enrollment.id, populate_existing=True)
    assert refreshed.sent_nudges == [2]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_next_threshold_sends_a_new_nudge(db_session):
    sprint = SprintFactory.live()
    enrollment = EnrollmentFactory.create(
        "participant-1", sprint.id, last_activity_at=days_ago(8), sent_nudges=[1, 2, 4]
    )
    db_session.add_all([sprint, enrollment])
    await db_session.commit()

    assert await send_dropoff_nudges(db_session, now=utc_now()) == 1

    refreshed = await db_session.get(Enrollment, enrollment.id, populate_existing=True)
    assert refreshed.sent_nudges == [1, 2, 4, 7]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_recent_and_finished_enrollments_are_left_alone(db_session):
    sprint = SprintFactory.live()
    db_session.add_all(
        [
            sprint,
            EnrollmentFactory.create("participant-1", sprint.id, last_activity_at=utc_now()),
            EnrollmentFactory.create(
                "participant-2",
                sprint.id,
                last_activity_at=days_ago(5),
                status=EnrollmentStatus.COMPLETED,
            ),
        ]
    )
    await db_session.commit()

    assert await send_dropoff_nudges(db_session, now=utc_now()) == 0
    assert await _notifications(db_session) == []
