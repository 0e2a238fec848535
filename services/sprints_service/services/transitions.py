"""Allowed approval-status transitions."""

from typing import Dict, FrozenSet

from fastapi import HTTPException, status
from services.sprints_service.models import ApprovalStatus

ALLOWED_TRANSITIONS: Dict[ApprovalStatus, FrozenSet[ApprovalStatus]] = {
    # draft -> approved only through platform auto-publish
    ApprovalStatus.DRAFT: frozenset(
        {ApprovalStatus.PENDING_APPROVAL, ApprovalStatus.APPROVED, ApprovalStatus.ARCHIVED}
    ),
    ApprovalStatus.PENDING_APPROVAL: frozenset(
        {ApprovalStatus.APPROVED, ApprovalStatus.REJECTED, ApprovalStatus.ARCHIVED}
    ),
    ApprovalStatus.APPROVED: frozenset(
        {ApprovalStatus.PENDING_APPROVAL, ApprovalStatus.ARCHIVED}
    ),
    ApprovalStatus.REJECTED: frozenset(
        {
            ApprovalStatus.DRAFT,
            ApprovalStatus.PENDING_APPROVAL,
            ApprovalStatus.APPROVED,
            ApprovalStatus.ARCHIVED,
        }
    ),
    ApprovalStatus.ARCHIVED: frozenset(),
}


def can_transition(current: ApprovalStatus, target: ApprovalStatus) -> bool:
    if current == target:
        return current != ApprovalStatus.ARCHIVED
    return target in ALLOWED_TRANSITIONS[current]


def assert_transition(current: ApprovalStatus, target: ApprovalStatus) -> None:
    """Raises 409 if ``current -> target`` is not a legal move."""
    if not can_transition(current, target):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot move sprint from {current.value} to {target.value}",
        )
