"""Demo catalog served when SPRINT_CATALOG_SOURCE=seed (or as a discovery fallback)."""

from typing import List

from libs.common.datetime_utils import utc_now
from services.sprints_service.models import ApprovalStatus, Sprint

SEED_COACH_ID = "platform"


def _days(duration: int, theme: str) -> List[dict]:
    return [
        {
            "day": day,
            "lesson_text": f"{theme}: lesson for day {day}.",
            "task_prompt": f"Complete the day {day} exercise and share what you noticed.",
        }
        for day in range(1, duration + 1)
    ]


SEED_SPRINTS = [
    {
        "id": "seed_core_platform",
        "title": "Orientation: How Growth Works Here",
        "description": "A short guided start to the platform and its lifecycle.",
        "category": "Core Platform Sprint",
        "duration": 3,
        "price": 0,
        "outcomes": ["Understand the lifecycle", "Pick a first focus"],
        "daily_content": _days(3, "Orientation"),
    },
    {
        "id": "seed_growth_fundamentals",
        "title": "Growth Fundamentals",
        "description": "Daily habits that make every later sprint stick.",
        "category": "Growth Fundamentals",
        "duration": 5,
        "price": 5000,
        "outcomes": ["A repeatable daily practice"],
        "daily_content": _days(5, "Fundamentals"),
    },
    {
        "id": "seed_clarity",
        "title": "Career Clarity Sprint",
        "description": "Narrow down where you are headed in seven focused days.",
        "category": "Clarity",
        "duration": 7,
        "price": 10000,
        "outcomes": ["A written direction statement"],
        "daily_content": _days(7, "Clarity"),
    },
]

SEED_ASSIGNMENTS = {
    "slot_found_orient": {"sprint_id": "seed_core_platform", "focus_criteria": []},
    "slot_found_core": {"sprint_id": "seed_growth_fundamentals", "focus_criteria": []},
    "slot_found_clarity": {
        "sprint_id": "seed_clarity",
        "focus_criteria": ["Get clarity on my career direction"],
    },
}


def build_seed_sprints() -> List[Sprint]:
    """Transient (never persisted) Sprint instances for the seed catalog."""
    now = utc_now()
    return [
        Sprint(
            coach_id=SEED_COACH_ID,
            approval_status=ApprovalStatus.APPROVED,
            published=True,
            deleted=False,
            difficulty="Beginner",
            pricing_type="cash",
            point_cost=0,
            for_who=[],
            not_for_who=[],
            method_snapshot=[],
            version=1,
            created_at=now,
            updated_at=now,
            approved_at=now,
            **data,
        )
        for data in SEED_SPRINTS
    ]
