"""Integration tests for enrollment, wallet, profile and notification routes."""

import pytest
from services.communications_service.models import NotificationType
from services.communications_service.services.notifications import create_notification
from services.enrollments_service.app.main import app as enrollments_app
from tests.conftest import make_coach_user, make_participant_user, override_auth
from tests.factories import EnrollmentFactory, ParticipantFactory, SprintFactory

# ---------------------------------------------------------------------------
# Enrollments
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_enroll_in_free_sprint_is_idempotent(enrollments_client, db_session):
    sprint = SprintFactory.live(price=0)
    db_session.add(sprint)
    await db_session.commit()

    first = await enrollments_client.post("/enrollments", json={"sprint_id": sprint.id})
    second = await enrollments_client.post("/enrollments", json={"sprint_id": sprint.id})

    assert first.status_code == 200
    assert first.json()["created"] is True
    assert second.json()["created"] is False
    assert second.json()["enrollment"]["id"] == first.json()["enrollment"]["id"]

    mine = await enrollments_client.get("/enrollments/me")
    assert [e["sprint_id"] for e in mine.json()] == [sprint.id]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_enroll_in_cash_sprint_requires_payment(enrollments_client, db_session):
    sprint = SprintFactory.live(price=5000)
    db_session.add(sprint)
    await db_session.commit()

    response = await enrollments_client.post("/enrollments", json={"sprint_id": sprint.id})

    assert response.status_code == 402


@pytest.mark.asyncio
@pytest.mark.integration
async def test_complete_every_day_finishes_sprint(enrollments_client, db_session):
    sprint = SprintFactory.live(duration=2)
    enrollment = EnrollmentFactory.create("participant-1", sprint.id, duration=2)
    db_session.add_all([sprint, enrollment])
    await db_session.commit()

    day_one = await enrollments_client.post(
        f"/enrollments/{enrollment.id}/days/1/complete",
        json={"reflection": "Good start"},
    )
    day_two = await enrollments_client.post(
        f"/enrollments/{enrollment.id}/days/2/complete", json={}
    )

    assert day_one.json()["sprint_completed"] is False
    assert day_one.json()["enrollment"]["progress"][0]["reflection"] == "Good start"
    assert day_two.status_code == 200
    assert day_two.json()["sprint_completed"] is True
    assert day_two.json()["trigger"] == "after_1_sprint"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_enrollment_detail_is_private(enrollments_client, db_session):
    enrollment = EnrollmentFactory.create("participant-1", "sprint_x", coach_id="coach-1")
    db_session.add(enrollment)
    await db_session.commit()

    with override_auth(enrollments_app, make_participant_user("participant-2")):
        stranger = await enrollments_client.get(f"/enrollments/{enrollment.id}")
    with override_auth(enrollments_app, make_coach_user("coach-1")):
        coach = await enrollments_client.get(f"/enrollments/{enrollment.id}")

    assert stranger.status_code == 403
    assert coach.status_code == 200


@pytest.mark.asyncio
@pytest.mark.integration
async def test_coach_leaves_feedback(enrollments_client, db_session):
    enrollment = EnrollmentFactory.create("participant-1", "sprint_x", coach_id="coach-1")
    db_session.add(enrollment)
    await db_session.commit()

    with override_auth(enrollments_app, make_coach_user("coach-1")):
        response = await enrollments_client.post(
            f"/enrollments/{enrollment.id}/days/1/feedback",
            json={"message": "Nice reflection"},
        )

    assert response.status_code == 201
    assert response.json()["user_id"] == "participant-1"
    assert response.json()["type"] == "coach_feedback"


# ---------------------------------------------------------------------------
# Wallet
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_milestone_claim_flow(wallet_client, db_session):
    db_session.add_all(
        [
            ParticipantFactory.create(id="participant-1", enrolled_sprint_ids=["sprint_x"]),
            EnrollmentFactory.create("participant-1", "sprint_x"),
        ]
    )
    await db_session.commit()

    milestones = {m["id"]: m for m in (await wallet_client.get("/wallet/milestones")).json()}
    assert milestones["s1"]["claimable"] is True
    assert milestones["s2"]["unlocked"] is False

    claimed = await wallet_client.post("/wallet/milestones/s1/claim")
    assert claimed.status_code == 200
    assert claimed.json()["wallet_balance"] == 5

    again = await wallet_client.post("/wallet/milestones/s1/claim")
    assert again.status_code == 409

    locked = await wallet_client.post("/wallet/milestones/s2/claim")
    assert locked.status_code == 409

    wallet = (await wallet_client.get("/wallet/me")).json()
    assert wallet["wallet_balance"] == 5
    assert wallet["claimed_milestone_ids"] == ["s1"]
    assert len(wallet["transactions"]) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_milestone_is_not_found(wallet_client):
    response = await wallet_client.post("/wallet/milestones/zz/claim")

    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Members and notifications
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_members_me_creates_profile_on_first_access(members_client):
    response = await members_client.get("/members/me")

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == "participant-1"
    assert body["email"] == "participant-1@test.com"
    assert body["wallet_balance"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_notification_feed_and_mark_read(communications_client, db_session):
    mine = await create_notification(
        db_session,
        user_id="participant-1",
        type=NotificationType.SPRINT_NUDGE,
        title="Keep going",
        body="Day 2 is waiting",
    )
    await create_notification(
        db_session,
        user_id="participant-2",
        type=NotificationType.SPRINT_NUDGE,
        title="Keep going",
        body="Day 3 is waiting",
    )

    feed = await communications_client.get("/notifications/me")
    assert [n["id"] for n in feed.json()] == [mine.id]

    read = await communications_client.post(f"/notifications/{mine.id}/read")
    assert read.json()["is_read"] is True

    unread = await communications_client.get(
        "/notifications/me", params={"unread_only": "true"}
    )
    assert unread.json() == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cannot_read_someone_elses_notification(communications_client, db_session):
    other = await create_notification(
        db_session,
        user_id="participant-2",
        type=NotificationType.SPRINT_NUDGE,
        title="Keep going",
        body="Day 3 is waiting",
    )

    response = await communications_client.post(f"/notifications/{other.id}/read")

    assert response.status_code == 404
