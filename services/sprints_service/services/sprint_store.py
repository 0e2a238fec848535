"""Sprint record persistence and the live/edit views over it."""

import copy
import math
from typing import List, Optional

from fastapi import HTTPException, status
from libs.auth.models import AdminUser, AuthUser, CoachUser, ParticipantUser, PartnerUser
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.sprints_service.models import ApprovalStatus, Sprint
from services.sprints_service.schemas import SprintCreate
from services.sprints_service.services.transitions import assert_transition
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# Fields that make up a sprint's authored content. Only these may be staged.
CONTENT_FIELDS = (
    "title",
    "description",
    "transformation",
    "category",
    "difficulty",
    "duration",
    "price",
    "pricing_type",
    "point_cost",
    "cover_image_url",
    "daily_content",
    "outcomes",
    "for_who",
    "not_for_who",
    "method_snapshot",
    "protocol",
    "outcome_tag",
    "outcome_statement",
    "sprint_type",
)

# Content columns that are NOT NULL; a null in an update is ignored for these.
NON_NULL_FIELDS = frozenset(
    {
        "title",
        "description",
        "category",
        "difficulty",
        "duration",
        "price",
        "pricing_type",
        "point_cost",
        "daily_content",
        "outcomes",
        "for_who",
        "not_for_who",
        "method_snapshot",
    }
)

LIFECYCLE_FIELDS = (
    "id",
    "coach_id",
    "approval_status",
    "published",
    "deleted",
    "version",
    "created_at",
    "updated_at",
    "submitted_at",
    "approved_at",
)

CREDIT_PRICE_UNIT = 500  # Naira per credit


def point_cost_for_price(price: int) -> int:
    return math.ceil(price / CREDIT_PRICE_UNIT) if price > 0 else 0


def empty_curriculum(duration: int) -> List[dict]:
    return [
        {"day": day, "lesson_text": "", "task_prompt": ""}
        for day in range(1, duration + 1)
    ]


def is_platform_category(category: Optional[str]) -> bool:
    return bool(category) and category in get_settings().PLATFORM_CATEGORIES


def clean_changes(changes: dict) -> dict:
    """Keep only content fields; drop nulls aimed at NOT NULL columns."""
    cleaned = {}
    for field, value in changes.items():
        if field not in CONTENT_FIELDS:
            continue
        if value is None and field in NON_NULL_FIELDS:
            continue
        cleaned[field] = value
    return cleaned


def canonical_content(sprint: Sprint) -> dict:
    return {field: copy.deepcopy(getattr(sprint, field)) for field in CONTENT_FIELDS}


def apply_content(sprint: Sprint, changes: dict) -> None:
    """Write content fields onto the canonical columns.

    JSON values are deep-copied so the ORM sees a new object on every write.
    """
    for field, value in changes.items():
        if field in CONTENT_FIELDS:
            setattr(sprint, field, copy.deepcopy(value))


def live_view(sprint: Sprint) -> dict:
    """What participants see: lifecycle plus canonical content only."""
    view = {field: getattr(sprint, field) for field in LIFECYCLE_FIELDS}
    view.update(canonical_content(sprint))
    return view


def edit_view(sprint: Sprint) -> dict:
    """What the owning coach and admins see: canonical overlaid by staged changes."""
    view = live_view(sprint)
    pending = sprint.pending_changes or {}
    view.update(copy.deepcopy(pending))
    view["pending_changes"] = copy.deepcopy(sprint.pending_changes)
    view["review_feedback"] = copy.deepcopy(sprint.review_feedback)
    view["has_pending_changes"] = bool(pending)
    return view


def can_manage(actor: AuthUser, sprint: Sprint) -> bool:
    if isinstance(actor, AdminUser):
        return True
    if isinstance(actor, CoachUser):
        return sprint.coach_id == actor.user_id
    if isinstance(actor, (ParticipantUser, PartnerUser)):
        return False
    raise TypeError(f"Unknown principal type: {type(actor).__name__}")


def ensure_can_manage(actor: AuthUser, sprint: Sprint) -> None:
    """Raises 403 unless the actor is the owning coach or an admin."""
    if not can_manage(actor, sprint):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this sprint",
        )


async def create_sprint(db: AsyncSession, actor: AuthUser, data: SprintCreate) -> Sprint:
    """Create a sprint in draft.

    Platform-category sprints created by an admin skip review and go live at once.
    """
    fields = data.model_dump(mode="json")
    if not fields.get("daily_content"):
        fields["daily_content"] = empty_curriculum(data.duration)
    if fields.get("point_cost") is None:
        fields["point_cost"] = point_cost_for_price(data.price)

    sprint = Sprint(
        coach_id=actor.user_id,
        approval_status=ApprovalStatus.DRAFT,
        published=False,
        deleted=False,
        version=1,
        **fields,
    )
    if isinstance(actor, AdminUser) and is_platform_category(data.category):
        now = utc_now()
        sprint.approval_status = ApprovalStatus.APPROVED
        sprint.published = True
        sprint.approved_at = now

    db.add(sprint)
    await db.commit()
    await db.refresh(sprint)
    logger.info(
        "Created sprint %s for %s (status=%s)",
        sprint.id,
        actor.user_id,
        sprint.approval_status.value,
    )
    return sprint


async def get_sprint(
    db: AsyncSession,
    sprint_id: str,
    *,
    for_update: bool = False,
    include_deleted: bool = False,
) -> Sprint:
    """Get a sprint by id. Raises 404 if missing or soft-deleted."""
    query = select(Sprint).where(Sprint.id == sprint_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(query)
    sprint = result.scalar_one_or_none()
    if not sprint or (sprint.deleted and not include_deleted):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Sprint not found"
        )
    return sprint


async def list_coach_sprints(db: AsyncSession, coach_id: str) -> List[Sprint]:
    result = await db.execute(
        select(Sprint)
        .where(Sprint.coach_id == coach_id, Sprint.deleted.is_(False))
        .order_by(Sprint.created_at.desc())
    )
    return list(result.scalars().all())


async def list_admin_sprints(
    db: AsyncSession, approval_status: Optional[ApprovalStatus] = None
) -> List[Sprint]:
    query = select(Sprint)
    if approval_status is not None:
        query = query.where(Sprint.approval_status == approval_status)
    if approval_status != ApprovalStatus.ARCHIVED:
        query = query.where(Sprint.deleted.is_(False))
    result = await db.execute(query.order_by(Sprint.updated_at.desc()))
    return list(result.scalars().all())


async def list_published_sprints(db: AsyncSession) -> List[Sprint]:
    result = await db.execute(
        select(Sprint)
        .where(Sprint.published.is_(True), Sprint.deleted.is_(False))
        .order_by(Sprint.created_at.desc())
    )
    return list(result.scalars().all())


async def list_orchestration_candidates(db: AsyncSession) -> List[Sprint]:
    """Sprints that may appear in a slot's eligibility pool."""
    result = await db.execute(
        select(Sprint)
        .where(
            Sprint.deleted.is_(False),
            or_(
                Sprint.approval_status == ApprovalStatus.APPROVED,
                Sprint.published.is_(True),
            ),
        )
        .order_by(Sprint.title)
    )
    return list(result.scalars().all())


async def list_sprints_by_ids(db: AsyncSession, sprint_ids: List[str]) -> List[Sprint]:
    if not sprint_ids:
        return []
    result = await db.execute(select(Sprint).where(Sprint.id.in_(sprint_ids)))
    return list(result.scalars().all())


async def archive_sprint(db: AsyncSession, actor: AuthUser, sprint_id: str) -> Sprint:
    """Soft delete. Existing enrollments keep pointing at the record."""
    sprint = await get_sprint(db, sprint_id, for_update=True, include_deleted=True)
    ensure_can_manage(actor, sprint)
    if sprint.approval_status == ApprovalStatus.ARCHIVED and sprint.deleted:
        return sprint

    assert_transition(sprint.approval_status, ApprovalStatus.ARCHIVED)
    sprint.approval_status = ApprovalStatus.ARCHIVED
    sprint.deleted = True
    sprint.published = False
    sprint.version += 1
    await db.commit()
    await db.refresh(sprint)
    logger.info("Archived sprint %s by %s", sprint.id, actor.user_id)
    return sprint
