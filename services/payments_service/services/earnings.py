"""Coach earnings by lifecycle stage.

A coach's net on an enrollment is the sprint's list price minus the platform
cut for the stage the sprint currently occupies. A sprint with no slot has no
stage: its entries report zero net and stay pending until it is tagged.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Mapping, Optional

from libs.common.datetime_utils import ensure_aware
from libs.common.logging import get_logger
from services.enrollments_service.models import Enrollment
from services.enrollments_service.services.progress import list_enrollments_for_sprints
from services.orchestration_service.lifecycle import (
    LifecycleStage,
    OrchestrationConfig,
    default_config,
)
from services.orchestration_service.services.registry import (
    Assignments,
    OrchestrationRegistry,
    stage_map_for,
)
from services.sprints_service.models import PricingType, Sprint
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# Platform cut (percent) per lifecycle stage
STAGE_CUTS: Dict[LifecycleStage, int] = {
    LifecycleStage.FOUNDATION: 40,
    LifecycleStage.DIRECTION: 35,
    LifecycleStage.EXECUTION: 30,
    LifecycleStage.PROOF: 25,
    LifecycleStage.POSITIONING: 20,
    LifecycleStage.STABILITY: 20,
    LifecycleStage.EXPANSION: 15,
}

_CENTS = Decimal("0.01")


class EarningStatus(str, enum.Enum):
    SETTLED = "settled"
    UNTAGGED_PENDING = "untagged_pending"


@dataclass
class EarningEntry:
    enrollment_id: str
    sprint_id: str
    sprint_title: str
    participant_id: str
    enrolled_at: datetime
    stage: Optional[LifecycleStage]
    gross_amount: float
    platform_cut_percent: Optional[int]
    net_earning: float
    status: EarningStatus


@dataclass
class EarningsSummary:
    entries: List[EarningEntry] = field(default_factory=list)
    total_gross: float = 0.0
    total_net: float = 0.0
    untagged_count: int = 0


def net_after_cut(gross: Decimal, cut_percent: int) -> Decimal:
    return (gross * (Decimal(100) - Decimal(cut_percent)) / Decimal(100)).quantize(
        _CENTS, rounding=ROUND_HALF_UP
    )


def compute_coach_earnings(
    assignments: Assignments,
    config: OrchestrationConfig,
    sprints: Iterable[Sprint],
    enrollments: Iterable[Enrollment],
    cuts: Mapping[LifecycleStage, int] = STAGE_CUTS,
) -> EarningsSummary:
    """Pure earnings calculation over the mapping, the coach's sprints and their enrollments."""
    stages = stage_map_for(assignments, config.slots)
    cash_sprints = {
        s.id: s
        for s in sprints
        if s.pricing_type == PricingType.CASH.value and (s.price or 0) > 0
    }

    entries: List[EarningEntry] = []
    total_gross = Decimal(0)
    total_net = Decimal(0)
    for enrollment in enrollments:
        sprint = cash_sprints.get(enrollment.sprint_id)
        if sprint is None:
            continue

        gross = Decimal(sprint.price)
        stage = stages.get(sprint.id)
        cut = cuts.get(stage) if stage is not None else None
        if cut is None:
            net = Decimal(0)
            status = EarningStatus.UNTAGGED_PENDING
        else:
            net = net_after_cut(gross, cut)
            status = EarningStatus.SETTLED

        total_gross += gross
        total_net += net
        entries.append(
            EarningEntry(
                enrollment_id=enrollment.id,
                sprint_id=sprint.id,
                sprint_title=sprint.title,
                participant_id=enrollment.participant_id,
                enrolled_at=enrollment.start_date,
                stage=stage,
                gross_amount=float(gross),
                platform_cut_percent=cut,
                net_earning=float(net),
                status=status,
            )
        )

    entries.sort(key=lambda e: ensure_aware(e.enrolled_at), reverse=True)
    return EarningsSummary(
        entries=entries,
        total_gross=float(total_gross),
        total_net=float(total_net),
        untagged_count=sum(1 for e in entries if e.status == EarningStatus.UNTAGGED_PENDING),
    )


async def get_coach_earnings(
    db: AsyncSession,
    coach_id: str,
    config: Optional[OrchestrationConfig] = None,
) -> EarningsSummary:
    """Load a coach's sprints (archived ones included), their enrollments and the mapping."""
    config = config or default_config()
    result = await db.execute(select(Sprint).where(Sprint.coach_id == coach_id))
    sprints = list(result.scalars().all())
    enrollments = await list_enrollments_for_sprints(db, [s.id for s in sprints])
    assignments = await OrchestrationRegistry(db, config).get_orchestration()

    summary = compute_coach_earnings(assignments, config, sprints, enrollments)
    logger.info(
        "Computed earnings for coach %s: %d entries, %d untagged",
        coach_id,
        len(summary.entries),
        summary.untagged_count,
    )
    return summary
