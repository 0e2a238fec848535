from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from services.sprints_service.models import ApprovalStatus, EditMode

Difficulty = Literal["Beginner", "Intermediate", "Advanced"]
Pricing = Literal["cash", "credits"]


class DailyContentItem(BaseModel):
    day: int = Field(..., ge=1)
    lesson_text: str = ""
    task_prompt: str = ""
    coach_insight: Optional[str] = None
    submission_type: Optional[str] = None
    proof_type: Optional[str] = None
    proof_options: Optional[List[str]] = None


class MethodStep(BaseModel):
    verb: str
    description: str = ""


class SprintCreate(BaseModel):
    title: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    duration: int = Field(..., ge=1, le=90)
    description: str = ""
    transformation: Optional[str] = None
    difficulty: Difficulty = "Beginner"
    price: int = Field(0, ge=0)
    pricing_type: Pricing = "cash"
    point_cost: Optional[int] = Field(None, ge=0)
    cover_image_url: Optional[str] = None
    daily_content: Optional[List[DailyContentItem]] = None
    outcomes: List[str] = Field(default_factory=list)
    for_who: List[str] = Field(default_factory=list)
    not_for_who: List[str] = Field(default_factory=list)
    method_snapshot: List[MethodStep] = Field(default_factory=list)
    protocol: Optional[str] = None
    outcome_tag: Optional[str] = None
    outcome_statement: Optional[str] = None
    sprint_type: Optional[str] = None


class SprintUpdate(BaseModel):
    """Partial content update. Only the fields sent are applied or staged."""

    title: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    duration: Optional[int] = Field(None, ge=1, le=90)
    description: Optional[str] = None
    transformation: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    price: Optional[int] = Field(None, ge=0)
    pricing_type: Optional[Pricing] = None
    point_cost: Optional[int] = Field(None, ge=0)
    cover_image_url: Optional[str] = None
    daily_content: Optional[List[DailyContentItem]] = None
    outcomes: Optional[List[str]] = None
    for_who: Optional[List[str]] = None
    not_for_who: Optional[List[str]] = None
    method_snapshot: Optional[List[MethodStep]] = None
    protocol: Optional[str] = None
    outcome_tag: Optional[str] = None
    outcome_statement: Optional[str] = None
    sprint_type: Optional[str] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, mode="json")


class SprintEditRequest(SprintUpdate):
    expected_version: Optional[int] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude={"expected_version"}, mode="json")


class SprintResponse(BaseModel):
    id: str
    coach_id: str
    approval_status: ApprovalStatus
    published: bool
    deleted: bool
    title: str
    description: str = ""
    transformation: Optional[str] = None
    category: str
    difficulty: str
    duration: int
    price: int
    pricing_type: str
    point_cost: int
    cover_image_url: Optional[str] = None
    daily_content: List[DailyContentItem] = Field(default_factory=list)
    outcomes: List[str] = Field(default_factory=list)
    for_who: List[str] = Field(default_factory=list)
    not_for_who: List[str] = Field(default_factory=list)
    method_snapshot: List[MethodStep] = Field(default_factory=list)
    protocol: Optional[str] = None
    outcome_tag: Optional[str] = None
    outcome_statement: Optional[str] = None
    sprint_type: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: datetime
    submitted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SprintEditViewResponse(SprintResponse):
    """Canonical content overlaid by staged changes, for the coach and admins."""

    pending_changes: Optional[dict] = None
    review_feedback: Optional[Dict[str, str]] = None
    has_pending_changes: bool = False


class SprintSaveResponse(BaseModel):
    mode: EditMode
    sprint: SprintEditViewResponse


class ApproveRequest(BaseModel):
    overrides: Optional[SprintUpdate] = None
    expected_version: Optional[int] = None


class RequestFixesRequest(BaseModel):
    feedback: Dict[str, str] = Field(default_factory=dict)
    expected_version: Optional[int] = None


class DiffTokenResponse(BaseModel):
    text: str
    is_new: bool


class FieldDiffResponse(BaseModel):
    field: str
    day: Optional[int] = None
    changed: bool
    live_text: str
    staged_text: str
    tokens: List[DiffTokenResponse] = Field(default_factory=list)


class SprintDiffResponse(BaseModel):
    sprint_id: str
    approval_status: ApprovalStatus
    fields: List[FieldDiffResponse]


class DiscoverableSprintResponse(SprintResponse):
    slot_id: str
    stage: str
