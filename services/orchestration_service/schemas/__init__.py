from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from services.orchestration_service.lifecycle import LifecycleStage, OrchestrationTrigger
from services.sprints_service.models import ApprovalStatus


class SlotAssignmentSchema(BaseModel):
    sprint_id: str = ""
    focus_criteria: List[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class OrchestrationResponse(BaseModel):
    version: int
    assignments: Dict[str, SlotAssignmentSchema]
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None


class OrchestrationSaveRequest(BaseModel):
    assignments: Dict[str, SlotAssignmentSchema]
    expected_version: Optional[int] = None


class SlotAssignRequest(BaseModel):
    sprint_id: Optional[str] = None
    focus_criteria: List[str] = Field(default_factory=list)
    expected_version: Optional[int] = None


class SlotResponse(BaseModel):
    id: str
    stage: LifecycleStage
    stage_description: str
    name: str
    slot_type: str
    required_category: Optional[str] = None
    focus_options: List[str]
    assignment: Optional[SlotAssignmentSchema] = None


class EligibleSprintResponse(BaseModel):
    id: str
    coach_id: str
    title: str
    category: str
    approval_status: ApprovalStatus
    published: bool
    is_current: bool = False


class ResolveRequest(BaseModel):
    stage: LifecycleStage
    trigger: OrchestrationTrigger
    focus: Optional[str] = None


class ResolveResponse(BaseModel):
    slot_id: str
    sprint_id: str
    stage: LifecycleStage

    model_config = ConfigDict(from_attributes=True)
