"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    sprint = SprintFactory.create(coach_id="coach-7", price=5000)
    db_session.add(sprint)
    await db_session.commit()
"""

import uuid
from datetime import datetime, timedelta, timezone

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now() -> datetime:
    return datetime.now(timezone.utc)


def days_ago(days: int) -> datetime:
    return _now() - timedelta(days=days)


def _short_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:10]}"


def complete_curriculum(duration: int) -> list:
    return [
        {
            "day": day,
            "lesson_text": f"Lesson for day {day}",
            "task_prompt": f"Task for day {day}",
        }
        for day in range(1, duration + 1)
    ]


# ---------------------------------------------------------------------------
# Sprints Service
# ---------------------------------------------------------------------------


class SprintFactory:
    @staticmethod
    def create(**overrides):
        from services.sprints_service.models import ApprovalStatus, Sprint

        duration = overrides.get("duration", 3)
        defaults = {
            "id": _short_id("sprint"),
            "coach_id": "coach-1",
            "approval_status": ApprovalStatus.DRAFT,
            "published": False,
            "deleted": False,
            "title": "Deep Work Reset",
            "description": "Rebuild your focus in three days.",
            "category": "Productivity",
            "difficulty": "Beginner",
            "duration": duration,
            "price": 0,
            "pricing_type": "cash",
            "point_cost": 0,
            "cover_image_url": "https://cdn.test/cover.png",
            "outcomes": ["A daily focus block"],
            "for_who": [],
            "not_for_who": [],
            "method_snapshot": [],
            "daily_content": complete_curriculum(duration),
            "version": 1,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Sprint(**defaults)

    @staticmethod
    def live(**overrides):
        """Approved and published."""
        from services.sprints_service.models import ApprovalStatus

        overrides.setdefault("approval_status", ApprovalStatus.APPROVED)
        overrides.setdefault("published", True)
        overrides.setdefault("approved_at", _now())
        return SprintFactory.create(**overrides)


# ---------------------------------------------------------------------------
# Members Service
# ---------------------------------------------------------------------------


class ParticipantFactory:
    @staticmethod
    def create(**overrides):
        from services.members_service.models import Participant

        participant_id = overrides.pop("id", None) or f"participant-{uuid.uuid4().hex[:8]}"
        defaults = {
            "id": participant_id,
            "email": f"{participant_id}@test.com",
            "display_name": "Test Participant",
            "joined_at": _now(),
            "enrolled_sprint_ids": [],
            "claimed_milestone_ids": [],
            "wallet_balance": 0,
            "people_helped": 0,
            "streak": 0,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Participant(**defaults)


# ---------------------------------------------------------------------------
# Enrollments Service
# ---------------------------------------------------------------------------


class EnrollmentFactory:
    @staticmethod
    def create(participant_id: str = "participant-1", sprint_id: str = "sprint_x", **overrides):
        from services.enrollments_service.models import (
            Enrollment,
            EnrollmentStatus,
            PaymentSource,
            enrollment_id_for,
        )

        duration = overrides.pop("duration", 3)
        defaults = {
            "id": enrollment_id_for(participant_id, sprint_id),
            "sprint_id": sprint_id,
            "participant_id": participant_id,
            "coach_id": "coach-1",
            "status": EnrollmentStatus.ACTIVE,
            "price_paid": 0,
            "currency": "NGN",
            "payment_source": PaymentSource.DIRECT,
            "progress": [{"day": d, "completed": False} for d in range(1, duration + 1)],
            "sent_nudges": [],
            "start_date": _now(),
            "last_activity_at": _now(),
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Enrollment(**defaults)


# ---------------------------------------------------------------------------
# Payments Service
# ---------------------------------------------------------------------------


class PaymentFactory:
    @staticmethod
    def create(**overrides):
        from services.payments_service.models import Payment, PaymentStatus

        defaults = {
            "id": f"vec-{uuid.uuid4().hex[:12]}",
            "user_id": "participant-1",
            "sprint_id": "sprint_x",
            "amount": 5000.0,
            "currency": "NGN",
            "status": PaymentStatus.INITIATED,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Payment(**defaults)
