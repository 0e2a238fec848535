"""Unit tests for the sprint approval workflow.

Tests call the approval service functions directly with the db_session fixture.
"""

import pytest
from fastapi import HTTPException
from services.communications_service.models import Notification, NotificationType
from services.sprints_service.models import ApprovalStatus, EditMode
from services.sprints_service.services.approval import (
    approve_sprint,
    curriculum_incomplete,
    incomplete_days,
    missing_registry_fields,
    request_fixes,
    save_sprint_edits,
    submit_for_review,
)
from services.sprints_service.services.sprint_store import archive_sprint, edit_view
from services.sprints_service.services.transitions import can_transition
from sqlalchemy import select
from tests.conftest import make_admin_user, make_coach_user
from tests.factories import SprintFactory

COACH = make_coach_user("coach-1")
OTHER_COACH = make_coach_user("coach-2")
ADMIN = make_admin_user()


async def _add(db, sprint):
    db.add(sprint)
    await db.commit()
    return sprint


# ---------------------------------------------------------------------------
# Completeness predicates
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_missing_registry_fields_flags_blank_values():
    view = {
        "title": "  ",
        "description": "ok",
        "category": "Focus",
        "cover_image_url": None,
        "outcomes": ["", "   "],
    }
    assert missing_registry_fields(view) == ["title", "cover_image_url", "outcomes"]


@pytest.mark.unit
def test_incomplete_days_lists_missing_and_blank_days():
    view = {
        "duration": 3,
        "daily_content": [
            {"day": 1, "lesson_text": "Read", "task_prompt": "Write"},
            {"day": 2, "lesson_text": "Read", "task_prompt": " "},
        ],
    }
    assert incomplete_days(view) == [2, 3]
    assert curriculum_incomplete(view)


@pytest.mark.unit
def test_zero_duration_counts_as_incomplete_curriculum():
    assert curriculum_incomplete({"duration": 0, "daily_content": []})


@pytest.mark.unit
def test_archived_is_terminal():
    for target in ApprovalStatus:
        assert not can_transition(ApprovalStatus.ARCHIVED, target)
    assert can_transition(ApprovalStatus.REJECTED, ApprovalStatus.DRAFT)
    assert not can_transition(ApprovalStatus.APPROVED, ApprovalStatus.DRAFT)


# ---------------------------------------------------------------------------
# save_sprint_edits
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_draft_edit_writes_canonical_directly(db_session):
    sprint = await _add(db_session, SprintFactory.create())

    saved, mode = await save_sprint_edits(
        db_session, COACH, sprint.id, {"title": "Focus Sprint"}
    )

    assert mode == EditMode.DIRECT
    assert saved.title == "Focus Sprint"
    assert saved.pending_changes is None
    assert saved.version == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_live_edit_is_staged_and_canonical_untouched(db_session):
    sprint = await _add(db_session, SprintFactory.live(title="Original"))

    saved, mode = await save_sprint_edits(
        db_session, COACH, sprint.id, {"title": "Renamed", "price": 2500}
    )

    assert mode == EditMode.STAGED
    assert saved.title == "Original"
    assert saved.price == 0
    assert saved.pending_changes == {"title": "Renamed", "price": 2500}
    assert saved.approval_status == ApprovalStatus.PENDING_APPROVAL
    assert saved.published is True
    assert saved.submitted_at is not None

    view = edit_view(saved)
    assert view["title"] == "Renamed"
    assert view["has_pending_changes"] is True


@pytest.mark.asyncio
@pytest.mark.unit
async def test_second_staged_edit_merges_into_pending(db_session):
    sprint = await _add(db_session, SprintFactory.live())

    await save_sprint_edits(db_session, COACH, sprint.id, {"title": "First"})
    saved, _ = await save_sprint_edits(
        db_session, COACH, sprint.id, {"description": "Second"}
    )

    assert saved.pending_changes == {"title": "First", "description": "Second"}
    assert saved.version == 3


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize(
    "changes",
    [{}, {"title": "Deep Work Reset"}, {"approval_status": "draft", "title": None}],
)
async def test_live_save_without_real_changes_stays_live(db_session, changes):
    sprint = await _add(db_session, SprintFactory.live(title="Deep Work Reset"))
    version = sprint.version

    saved, mode = await save_sprint_edits(db_session, COACH, sprint.id, changes)

    assert mode == EditMode.STAGED
    assert saved.approval_status == ApprovalStatus.APPROVED
    assert saved.pending_changes is None
    assert saved.version == version


@pytest.mark.asyncio
@pytest.mark.unit
async def test_live_save_stages_only_fields_that_differ(db_session):
    sprint = await _add(db_session, SprintFactory.live(title="Deep Work Reset"))

    saved, _ = await save_sprint_edits(
        db_session, COACH, sprint.id, {"title": "Deep Work Reset", "description": "New"}
    )

    assert saved.pending_changes == {"description": "New"}
    assert saved.approval_status == ApprovalStatus.PENDING_APPROVAL


@pytest.mark.asyncio
@pytest.mark.unit
async def test_edit_ignores_lifecycle_fields_and_null_required_fields(db_session):
    sprint = await _add(db_session, SprintFactory.create(title="Keep"))

    saved, _ = await save_sprint_edits(
        db_session,
        COACH,
        sprint.id,
        {"title": None, "approval_status": "approved", "published": True, "protocol": None},
    )

    assert saved.title == "Keep"
    assert saved.approval_status == ApprovalStatus.DRAFT
    assert saved.published is False


@pytest.mark.asyncio
@pytest.mark.unit
async def test_edit_by_other_coach_is_forbidden(db_session):
    sprint = await _add(db_session, SprintFactory.create())

    with pytest.raises(HTTPException) as exc:
        await save_sprint_edits(db_session, OTHER_COACH, sprint.id, {"title": "Nope"})
    assert exc.value.status_code == 403


@pytest.mark.asyncio
@pytest.mark.unit
async def test_stale_expected_version_is_rejected(db_session):
    sprint = await _add(db_session, SprintFactory.create())
    await save_sprint_edits(db_session, COACH, sprint.id, {"title": "v2"}, expected_version=1)

    with pytest.raises(HTTPException) as exc:
        await save_sprint_edits(
            db_session, COACH, sprint.id, {"title": "stale"}, expected_version=1
        )
    assert exc.value.status_code == 409


@pytest.mark.asyncio
@pytest.mark.unit
async def test_admin_edit_of_platform_sprint_publishes_immediately(db_session):
    sprint = await _add(
        db_session,
        SprintFactory.live(
            category="Growth Fundamentals",
            pending_changes={"description": "Staged earlier"},
            approval_status=ApprovalStatus.PENDING_APPROVAL,
        ),
    )

    saved, mode = await save_sprint_edits(db_session, ADMIN, sprint.id, {"title": "Platform"})

    assert mode == EditMode.AUTO_PUBLISHED
    assert saved.title == "Platform"
    assert saved.description == "Staged earlier"
    assert saved.pending_changes is None
    assert saved.approval_status == ApprovalStatus.APPROVED
    assert saved.published is True


@pytest.mark.asyncio
@pytest.mark.unit
async def test_coach_edit_of_platform_category_is_still_staged(db_session):
    sprint = await _add(db_session, SprintFactory.live(category="Growth Fundamentals"))

    _, mode = await save_sprint_edits(db_session, COACH, sprint.id, {"title": "Coach"})

    assert mode == EditMode.STAGED


# ---------------------------------------------------------------------------
# submit_for_review
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_submit_incomplete_sprint_reports_what_is_missing(db_session):
    sprint = await _add(
        db_session,
        SprintFactory.create(
            cover_image_url=None,
            daily_content=[{"day": 1, "lesson_text": "Only one", "task_prompt": "Do it"}],
        ),
    )

    with pytest.raises(HTTPException) as exc:
        await submit_for_review(db_session, COACH, sprint.id)

    assert exc.value.status_code == 422
    detail = exc.value.detail
    assert detail["registry_incomplete"] is True
    assert detail["curriculum_incomplete"] is True
    assert detail["missing_fields"] == ["cover_image_url"]
    assert detail["incomplete_days"] == [2, 3]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_submit_complete_draft_moves_to_pending(db_session):
    sprint = await _add(db_session, SprintFactory.create())

    submitted = await submit_for_review(db_session, COACH, sprint.id)

    assert submitted.approval_status == ApprovalStatus.PENDING_APPROVAL
    assert submitted.submitted_at is not None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_submit_from_pending_is_a_conflict(db_session):
    sprint = await _add(
        db_session, SprintFactory.create(approval_status=ApprovalStatus.PENDING_APPROVAL)
    )

    with pytest.raises(HTTPException) as exc:
        await submit_for_review(db_session, COACH, sprint.id)
    assert exc.value.status_code == 409


# ---------------------------------------------------------------------------
# approve_sprint / request_fixes
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_approve_merges_staged_changes_and_clears_them(db_session):
    sprint = await _add(db_session, SprintFactory.live(title="Old"))
    await save_sprint_edits(db_session, COACH, sprint.id, {"title": "New", "price": 3000})

    approved = await approve_sprint(db_session, ADMIN, sprint.id)

    assert approved.title == "New"
    assert approved.price == 3000
    assert approved.pending_changes is None
    assert approved.review_feedback is None
    assert approved.approval_status == ApprovalStatus.APPROVED
    assert approved.published is True
    assert approved.approved_at is not None

    result = await db_session.execute(
        select(Notification).where(Notification.user_id == "coach-1")
    )
    notifications = result.scalars().all()
    assert [n.type for n in notifications] == [NotificationType.SPRINT_APPROVED]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_admin_overrides_win_over_staged_values(db_session):
    sprint = await _add(db_session, SprintFactory.live())
    await save_sprint_edits(db_session, COACH, sprint.id, {"title": "Coach title"})

    approved = await approve_sprint(
        db_session, ADMIN, sprint.id, overrides={"title": "Admin title"}
    )

    assert approved.title == "Admin title"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_approve_draft_is_a_conflict(db_session):
    sprint = await _add(db_session, SprintFactory.create())

    with pytest.raises(HTTPException) as exc:
        await approve_sprint(db_session, ADMIN, sprint.id)
    assert exc.value.status_code == 409


@pytest.mark.asyncio
@pytest.mark.unit
async def test_request_fixes_keeps_staged_changes(db_session):
    sprint = await _add(db_session, SprintFactory.live(title="Live"))
    await save_sprint_edits(db_session, COACH, sprint.id, {"title": "Staged"})

    rejected = await request_fixes(
        db_session, ADMIN, sprint.id, feedback={"title": "Too vague", "price": "  "}
    )

    assert rejected.approval_status == ApprovalStatus.REJECTED
    assert rejected.pending_changes == {"title": "Staged"}
    assert rejected.review_feedback == {"title": "Too vague"}
    assert rejected.title == "Live"
    assert rejected.published is True


@pytest.mark.asyncio
@pytest.mark.unit
async def test_rejected_sprint_with_staged_changes_can_still_be_approved(db_session):
    sprint = await _add(db_session, SprintFactory.live())
    await save_sprint_edits(db_session, COACH, sprint.id, {"title": "Second try"})
    await request_fixes(db_session, ADMIN, sprint.id, feedback={"title": "Fine, actually"})

    approved = await approve_sprint(db_session, ADMIN, sprint.id)

    assert approved.title == "Second try"
    assert approved.approval_status == ApprovalStatus.APPROVED


@pytest.mark.asyncio
@pytest.mark.unit
async def test_rework_after_fixes_returns_to_draft_then_resubmits(db_session):
    sprint = await _add(db_session, SprintFactory.live())
    await save_sprint_edits(db_session, COACH, sprint.id, {"title": "Attempt one"})
    await request_fixes(db_session, ADMIN, sprint.id, feedback={"title": "Sharper"})

    reworked, mode = await save_sprint_edits(
        db_session, COACH, sprint.id, {"title": "Attempt two"}
    )
    assert mode == EditMode.STAGED
    assert reworked.approval_status == ApprovalStatus.DRAFT
    assert reworked.pending_changes == {"title": "Attempt two"}

    resubmitted = await submit_for_review(db_session, COACH, sprint.id)
    assert resubmitted.approval_status == ApprovalStatus.PENDING_APPROVAL


# ---------------------------------------------------------------------------
# archive_sprint
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_archive_is_terminal_and_idempotent(db_session):
    sprint = await _add(db_session, SprintFactory.live())

    archived = await archive_sprint(db_session, COACH, sprint.id)
    assert archived.approval_status == ApprovalStatus.ARCHIVED
    assert archived.deleted is True
    assert archived.published is False
    version = archived.version

    again = await archive_sprint(db_session, COACH, sprint.id)
    assert again.version == version

    with pytest.raises(HTTPException) as exc:
        await save_sprint_edits(db_session, COACH, sprint.id, {"title": "Revive"})
    assert exc.value.status_code == 404
