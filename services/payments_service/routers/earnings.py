"""Coach earnings routes."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import require_admin, require_coach
from libs.auth.models import AdminUser, CoachUser
from libs.db.session import get_async_db
from services.orchestration_service.lifecycle import OrchestrationConfig
from services.orchestration_service.routers.orchestration import get_orchestration_config
from services.payments_service.schemas import EarningsSummaryResponse
from services.payments_service.services.earnings import get_coach_earnings
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/payments", tags=["earnings"])


@router.get("/coach/earnings", response_model=EarningsSummaryResponse)
async def my_earnings(
    current_user: CoachUser = Depends(require_coach),
    config: OrchestrationConfig = Depends(get_orchestration_config),
    db: AsyncSession = Depends(get_async_db),
):
    summary = await get_coach_earnings(db, current_user.user_id, config)
    return EarningsSummaryResponse.from_summary(summary)


@router.get(
    "/admin/coaches/{coach_id}/earnings", response_model=EarningsSummaryResponse
)
async def coach_earnings_for_admin(
    coach_id: str,
    _admin: AdminUser = Depends(require_admin),
    config: OrchestrationConfig = Depends(get_orchestration_config),
    db: AsyncSession = Depends(get_async_db),
):
    """Admin view of any coach's earnings."""
    summary = await get_coach_earnings(db, coach_id, config)
    return EarningsSummaryResponse.from_summary(summary)
