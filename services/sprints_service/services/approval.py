"""Sprint approval workflow.

Edits to a live sprint are staged in ``pending_changes`` and only reach the
canonical columns when an admin approves them. Platform-category sprints
edited by an admin skip review.
"""

from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from libs.auth.models import AdminUser, AuthUser
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from libs.common.versioning import check_expected_version
from services.communications_service.models import NotificationType
from services.communications_service.services.notifications import notify
from services.sprints_service.models import ApprovalStatus, EditMode, Sprint
from services.sprints_service.services.diff import merge_pending
from services.sprints_service.services.sprint_store import (
    apply_content,
    canonical_content,
    clean_changes,
    edit_view,
    ensure_can_manage,
    get_sprint,
    is_platform_category,
)
from services.sprints_service.services.transitions import assert_transition
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

REGISTRY_FIELDS = ("title", "description", "category", "cover_image_url")


# ---------------------------------------------------------------------------
# Completeness predicates (evaluated on the edit view)
# ---------------------------------------------------------------------------


def _blank(value) -> bool:
    return not isinstance(value, str) or not value.strip()


def missing_registry_fields(view: dict) -> List[str]:
    missing = [name for name in REGISTRY_FIELDS if _blank(view.get(name))]
    outcomes = view.get("outcomes") or []
    if not any(not _blank(item) for item in outcomes):
        missing.append("outcomes")
    return missing


def registry_incomplete(view: dict) -> bool:
    return bool(missing_registry_fields(view))


def incomplete_days(view: dict) -> List[int]:
    """Days in 1..duration lacking a lesson text or task prompt."""
    by_day = {}
    for entry in view.get("daily_content") or []:
        if isinstance(entry, dict) and entry.get("day") is not None:
            by_day[int(entry["day"])] = entry

    duration = view.get("duration") or 0
    missing = []
    for day in range(1, duration + 1):
        entry = by_day.get(day)
        if entry is None or _blank(entry.get("lesson_text")) or _blank(entry.get("task_prompt")):
            missing.append(day)
    return missing


def curriculum_incomplete(view: dict) -> bool:
    duration = view.get("duration") or 0
    return duration < 1 or bool(incomplete_days(view))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def is_live(sprint: Sprint) -> bool:
    """Whether the canonical content is already public (edits must be staged)."""
    return (
        sprint.published
        or sprint.approval_status == ApprovalStatus.APPROVED
        or bool(sprint.pending_changes)
    )


def _set_status(sprint: Sprint, target: ApprovalStatus) -> None:
    assert_transition(sprint.approval_status, target)
    if sprint.approval_status != target:
        logger.info(
            "Sprint %s: %s -> %s", sprint.id, sprint.approval_status.value, target.value
        )
    sprint.approval_status = target


def _publish(sprint: Sprint) -> None:
    _set_status(sprint, ApprovalStatus.APPROVED)
    sprint.published = True
    sprint.pending_changes = None
    sprint.review_feedback = None
    sprint.approved_at = utc_now()


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


async def save_sprint_edits(
    db: AsyncSession,
    actor: AuthUser,
    sprint_id: str,
    changes: dict,
    expected_version: Optional[int] = None,
) -> Tuple[Sprint, EditMode]:
    """Apply or stage a content edit, depending on the sprint's state."""
    sprint = await get_sprint(db, sprint_id, for_update=True)
    ensure_can_manage(actor, sprint)
    if sprint.approval_status == ApprovalStatus.ARCHIVED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Archived sprints cannot be edited"
        )
    check_expected_version(sprint.version, expected_version, "Sprint")

    changes = clean_changes(changes)
    target_category = changes.get("category", sprint.category)

    if isinstance(actor, AdminUser) and (
        is_platform_category(sprint.category) or is_platform_category(target_category)
    ):
        # Platform content: fold any staged edit in and publish immediately
        apply_content(sprint, merge_pending({}, sprint.pending_changes, changes))
        _publish(sprint)
        mode = EditMode.AUTO_PUBLISHED
    elif is_live(sprint):
        current = edit_view(sprint)
        changes = {f: v for f, v in changes.items() if current.get(f) != v}
        if not changes:
            # Nothing differs from what the coach already sees; stay live
            await db.commit()
            logger.info("Sprint %s save by %s changed nothing", sprint.id, actor.user_id)
            return sprint, EditMode.STAGED
        staged = dict(sprint.pending_changes or {})
        staged.update(changes)
        sprint.pending_changes = staged
        if sprint.approval_status == ApprovalStatus.APPROVED:
            _set_status(sprint, ApprovalStatus.PENDING_APPROVAL)
            sprint.submitted_at = utc_now()
        elif sprint.approval_status == ApprovalStatus.REJECTED:
            _set_status(sprint, ApprovalStatus.DRAFT)
        mode = EditMode.STAGED
    else:
        apply_content(sprint, changes)
        if sprint.approval_status == ApprovalStatus.REJECTED:
            _set_status(sprint, ApprovalStatus.DRAFT)
        mode = EditMode.DIRECT

    sprint.version += 1
    await db.commit()
    await db.refresh(sprint)
    logger.info(
        "Saved sprint %s by %s (mode=%s, fields=%s)",
        sprint.id,
        actor.user_id,
        mode.value,
        sorted(changes),
    )
    return sprint, mode


async def submit_for_review(
    db: AsyncSession,
    actor: AuthUser,
    sprint_id: str,
    expected_version: Optional[int] = None,
) -> Sprint:
    """draft/rejected -> pending_approval, gated on registry and curriculum completeness."""
    sprint = await get_sprint(db, sprint_id, for_update=True)
    ensure_can_manage(actor, sprint)
    if sprint.approval_status not in (ApprovalStatus.DRAFT, ApprovalStatus.REJECTED):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot submit a sprint in {sprint.approval_status.value} state",
        )
    check_expected_version(sprint.version, expected_version, "Sprint")

    view = edit_view(sprint)
    missing_fields = missing_registry_fields(view)
    missing_days = incomplete_days(view)
    if missing_fields or curriculum_incomplete(view):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": "Sprint is incomplete",
                "registry_incomplete": bool(missing_fields),
                "curriculum_incomplete": curriculum_incomplete(view),
                "missing_fields": missing_fields,
                "incomplete_days": missing_days,
            },
        )

    _set_status(sprint, ApprovalStatus.PENDING_APPROVAL)
    sprint.submitted_at = utc_now()
    sprint.version += 1
    await db.commit()
    logger.info("Sprint %s submitted for review by %s", sprint.id, actor.user_id)

    await notify(
        db,
        user_id=sprint.coach_id,
        type=NotificationType.SPRINT_SUBMITTED,
        title="Sprint submitted",
        body=f'"{sprint.title}" is waiting for review.',
        action_url=f"/coach/sprint/edit/{sprint.id}",
    )
    await db.refresh(sprint)
    return sprint


async def approve_sprint(
    db: AsyncSession,
    admin: AdminUser,
    sprint_id: str,
    overrides: Optional[dict] = None,
    expected_version: Optional[int] = None,
) -> Sprint:
    """Merge staged changes (and admin overrides) into canonical and publish.

    Merge, clear and publish happen in one commit.
    """
    sprint = await get_sprint(db, sprint_id, for_update=True)
    staged_rejection = (
        sprint.approval_status == ApprovalStatus.REJECTED and bool(sprint.pending_changes)
    )
    if sprint.approval_status != ApprovalStatus.PENDING_APPROVAL and not staged_rejection:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot approve a sprint in {sprint.approval_status.value} state",
        )
    check_expected_version(sprint.version, expected_version, "Sprint")

    merged = merge_pending(
        canonical_content(sprint), sprint.pending_changes, clean_changes(overrides or {})
    )
    apply_content(sprint, merged)
    _publish(sprint)
    sprint.version += 1
    await db.commit()
    logger.info("Sprint %s approved by %s", sprint.id, admin.user_id)

    await notify(
        db,
        user_id=sprint.coach_id,
        type=NotificationType.SPRINT_APPROVED,
        title="Sprint approved",
        body=f'"{sprint.title}" has been approved and is now published.',
        action_url=f"/coach/sprint/edit/{sprint.id}",
    )
    # notify() rolls back on failure, which expires loaded rows
    await db.refresh(sprint)
    return sprint


async def request_fixes(
    db: AsyncSession,
    admin: AdminUser,
    sprint_id: str,
    feedback: Optional[dict] = None,
    expected_version: Optional[int] = None,
) -> Sprint:
    """pending_approval -> rejected. Staged changes are kept for the coach to refine."""
    sprint = await get_sprint(db, sprint_id, for_update=True)
    if sprint.approval_status != ApprovalStatus.PENDING_APPROVAL:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot request fixes on a sprint in {sprint.approval_status.value} state",
        )
    check_expected_version(sprint.version, expected_version, "Sprint")

    feedback = {k: v for k, v in (feedback or {}).items() if v and v.strip()}
    _set_status(sprint, ApprovalStatus.REJECTED)
    sprint.review_feedback = feedback or None
    sprint.version += 1
    await db.commit()
    logger.info(
        "Fixes requested on sprint %s by %s (%d notes)",
        sprint.id,
        admin.user_id,
        len(feedback),
    )

    await notify(
        db,
        user_id=sprint.coach_id,
        type=NotificationType.SPRINT_CHANGES_REQUESTED,
        title="Changes requested",
        body=f'An admin requested changes to "{sprint.title}".',
        action_url=f"/coach/sprint/edit/{sprint.id}",
    )
    await db.refresh(sprint)
    return sprint

