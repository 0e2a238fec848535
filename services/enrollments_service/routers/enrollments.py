"""Participant enrollment and daily progress router."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import get_current_user, require_participant
from libs.auth.models import AdminUser, AuthUser, CoachUser
from libs.db.session import get_async_db
from services.communications_service.schemas import NotificationResponse
from services.enrollments_service.models import EnrollmentStatus
from services.enrollments_service.schemas import (
    CoachFeedbackRequest,
    DayCompleteRequest,
    DayCompleteResponse,
    EnrollmentResponse,
    EnrollRequest,
    EnrollResponse,
)
from services.enrollments_service.services.progress import (
    complete_day,
    enroll_self,
    get_enrollment,
    list_participant_enrollments,
    post_coach_feedback,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/enrollments", tags=["enrollments"])


@router.post("", response_model=EnrollResponse)
async def enroll(
    payload: EnrollRequest,
    current_user: AuthUser = Depends(require_participant),
    db: AsyncSession = Depends(get_async_db),
):
    """Enroll in a free or credit-priced sprint. Safe to retry."""
    enrollment, created = await enroll_self(db, current_user.user_id, payload.sprint_id)
    return EnrollResponse(
        created=created, enrollment=EnrollmentResponse.model_validate(enrollment)
    )


@router.get("/me", response_model=List[EnrollmentResponse])
async def get_my_enrollments(
    status_filter: Optional[EnrollmentStatus] = None,
    current_user: AuthUser = Depends(require_participant),
    db: AsyncSession = Depends(get_async_db),
):
    return await list_participant_enrollments(
        db, current_user.user_id, status_filter=status_filter
    )


@router.get("/{enrollment_id}", response_model=EnrollmentResponse)
async def get_enrollment_detail(
    enrollment_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Visible to the participant, the sprint's coach and admins."""
    enrollment = await get_enrollment(db, enrollment_id)
    if isinstance(current_user, AdminUser):
        return enrollment
    if isinstance(current_user, CoachUser) and enrollment.coach_id == current_user.user_id:
        return enrollment
    if enrollment.participant_id == current_user.user_id:
        return enrollment
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You do not have access to this enrollment",
    )


@router.post("/{enrollment_id}/days/{day}/complete", response_model=DayCompleteResponse)
async def complete_enrollment_day(
    enrollment_id: str,
    day: int,
    payload: DayCompleteRequest,
    current_user: AuthUser = Depends(require_participant),
    db: AsyncSession = Depends(get_async_db),
):
    enrollment, trigger = await complete_day(
        db,
        current_user.user_id,
        enrollment_id,
        day,
        submission=payload.submission,
        submission_file_url=payload.submission_file_url,
        reflection=payload.reflection,
        proof_selection=payload.proof_selection,
    )
    return DayCompleteResponse(
        enrollment=EnrollmentResponse.model_validate(enrollment),
        sprint_completed=enrollment.status == EnrollmentStatus.COMPLETED,
        trigger=trigger,
    )


@router.post(
    "/{enrollment_id}/days/{day}/feedback",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def leave_coach_feedback(
    enrollment_id: str,
    day: int,
    payload: CoachFeedbackRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await post_coach_feedback(
        db, current_user, enrollment_id, day, payload.message
    )
