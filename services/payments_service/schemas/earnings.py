from dataclasses import asdict
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel
from services.orchestration_service.lifecycle import LifecycleStage
from services.payments_service.services.earnings import EarningsSummary, EarningStatus


class EarningEntryResponse(BaseModel):
    enrollment_id: str
    sprint_id: str
    sprint_title: str
    participant_id: str
    enrolled_at: datetime
    stage: Optional[LifecycleStage] = None
    gross_amount: float
    platform_cut_percent: Optional[int] = None
    net_earning: float
    status: EarningStatus


class EarningsSummaryResponse(BaseModel):
    entries: List[EarningEntryResponse]
    total_gross: float
    total_net: float
    untagged_count: int

    @classmethod
    def from_summary(cls, summary: EarningsSummary) -> "EarningsSummaryResponse":
        return cls(
            entries=[EarningEntryResponse(**asdict(e)) for e in summary.entries],
            total_gross=summary.total_gross,
            total_net=summary.total_net,
            untagged_count=summary.untagged_count,
        )
