"""Enum definitions for communications service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class NotificationType(str, enum.Enum):
    PAYMENT_SUCCESS = "payment_success"
    SPRINT_SUBMITTED = "sprint_submitted"
    SPRINT_APPROVED = "sprint_approved"
    SPRINT_CHANGES_REQUESTED = "sprint_changes_requested"
    SPRINT_COMPLETED = "sprint_completed"
    SPRINT_NUDGE = "sprint_nudge"
    COACH_FEEDBACK = "coach_feedback"
    MILESTONE_CLAIMED = "milestone_claimed"
