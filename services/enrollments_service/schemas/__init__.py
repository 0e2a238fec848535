from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from services.enrollments_service.models import EnrollmentStatus, PaymentSource
from services.orchestration_service.lifecycle import OrchestrationTrigger


class DayProgress(BaseModel):
    day: int
    completed: bool = False
    completed_at: Optional[datetime] = None
    submission: Optional[str] = None
    submission_file_url: Optional[str] = None
    reflection: Optional[str] = None
    proof_selection: Optional[List[str]] = None


class EnrollmentResponse(BaseModel):
    id: str
    sprint_id: str
    participant_id: str
    coach_id: str
    status: EnrollmentStatus
    price_paid: int
    currency: str
    payment_source: PaymentSource
    referral_source: Optional[str] = None
    progress: List[DayProgress]
    sent_nudges: List[int] = Field(default_factory=list)
    start_date: datetime
    last_activity_at: datetime
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class EnrollRequest(BaseModel):
    sprint_id: str


class EnrollResponse(BaseModel):
    created: bool
    enrollment: EnrollmentResponse


class DayCompleteRequest(BaseModel):
    submission: Optional[str] = None
    submission_file_url: Optional[str] = None
    reflection: Optional[str] = None
    proof_selection: Optional[List[str]] = None


class DayCompleteResponse(BaseModel):
    enrollment: EnrollmentResponse
    sprint_completed: bool
    trigger: Optional[OrchestrationTrigger] = None


class CoachFeedbackRequest(BaseModel):
    message: str = Field(..., min_length=1)
