"""Milestone catalog and unlock evaluation.

Every milestone is a threshold over one deterministic progress counter.
Nothing here touches the database.
"""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from libs.common.datetime_utils import utc_now, whole_days_between
from services.enrollments_service.models import Enrollment
from services.members_service.models import Participant


class MilestoneMetric(str, enum.Enum):
    SPRINTS_STARTED = "sprints_started"
    SPRINTS_COMPLETED = "sprints_completed"
    REFLECTIONS = "reflections"
    DAYS_SINCE_JOIN = "days_since_join"
    PEOPLE_HELPED = "people_helped"
    STREAK = "streak"


@dataclass(frozen=True)
class Milestone:
    id: str
    title: str
    description: str
    metric: MilestoneMetric
    target: int
    points: int

    def is_unlocked(self, current: int) -> bool:
        return current >= self.target


@dataclass
class MilestoneStatus:
    milestone: Milestone
    current: int
    unlocked: bool
    claimed: bool

    @property
    def claimable(self) -> bool:
        return self.unlocked and not self.claimed


DEFAULT_MILESTONES: Tuple[Milestone, ...] = (
    Milestone("s1", "Sprint Starter", "Enrolled in your first sprint", MilestoneMetric.SPRINTS_STARTED, 1, 5),
    Milestone("s2", "Finisher", "Completed your first sprint", MilestoneMetric.SPRINTS_COMPLETED, 1, 10),
    Milestone("s3", "Consistent", "Completed 3 sprints", MilestoneMetric.SPRINTS_COMPLETED, 3, 25),
    Milestone("s4", "Master", "Completed 5 sprints", MilestoneMetric.SPRINTS_COMPLETED, 5, 50),
    Milestone("r1", "First Reflection", "Wrote your first daily reflection", MilestoneMetric.REFLECTIONS, 1, 5),
    Milestone("r2", "Reflective", "Wrote 10 daily reflections", MilestoneMetric.REFLECTIONS, 10, 15),
    Milestone("t1", "One Week In", "A week since you joined", MilestoneMetric.DAYS_SINCE_JOIN, 7, 5),
    Milestone("t2", "One Month In", "A month since you joined", MilestoneMetric.DAYS_SINCE_JOIN, 30, 15),
    Milestone("h1", "Helper", "Helped your first person", MilestoneMetric.PEOPLE_HELPED, 1, 10),
    Milestone("h2", "Guide", "Helped 5 people", MilestoneMetric.PEOPLE_HELPED, 5, 25),
    Milestone("h3", "Mentor", "Helped 10 people", MilestoneMetric.PEOPLE_HELPED, 10, 50),
    Milestone("k1", "On a Roll", "3-day activity streak", MilestoneMetric.STREAK, 3, 5),
    Milestone("k2", "Unstoppable", "7-day activity streak", MilestoneMetric.STREAK, 7, 15),
)


def find_milestone(
    milestone_id: str, catalog: Iterable[Milestone] = DEFAULT_MILESTONES
) -> Optional[Milestone]:
    return next((m for m in catalog if m.id == milestone_id), None)


def _has_text(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def compute_counters(
    participant: Participant,
    enrollments: Sequence[Enrollment],
    now: Optional[datetime] = None,
) -> Dict[MilestoneMetric, int]:
    now = now or utc_now()
    started = set(participant.enrolled_sprint_ids or []) | {e.sprint_id for e in enrollments}
    return {
        MilestoneMetric.SPRINTS_STARTED: len(started),
        MilestoneMetric.SPRINTS_COMPLETED: sum(1 for e in enrollments if e.is_fully_completed),
        MilestoneMetric.REFLECTIONS: sum(
            1
            for e in enrollments
            for entry in e.progress or []
            if _has_text(entry.get("reflection"))
        ),
        MilestoneMetric.DAYS_SINCE_JOIN: whole_days_between(participant.joined_at, now),
        MilestoneMetric.PEOPLE_HELPED: participant.people_helped or 0,
        MilestoneMetric.STREAK: participant.streak or 0,
    }


def evaluate_milestones(
    catalog: Iterable[Milestone],
    counters: Dict[MilestoneMetric, int],
    claimed_ids: Iterable[str],
) -> List[MilestoneStatus]:
    claimed = set(claimed_ids or [])
    statuses = []
    for milestone in catalog:
        current = counters.get(milestone.metric, 0)
        statuses.append(
            MilestoneStatus(
                milestone=milestone,
                current=current,
                unlocked=milestone.is_unlocked(current),
                claimed=milestone.id in claimed,
            )
        )
    return statuses
