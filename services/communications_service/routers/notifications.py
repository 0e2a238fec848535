"""Notification feed router."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.communications_service.schemas import NotificationResponse
from services.communications_service.services.notifications import (
    list_notifications,
    mark_as_read,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/me", response_model=List[NotificationResponse])
async def get_my_notifications(
    since: Optional[datetime] = None,
    unread_only: bool = False,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await list_notifications(
        db, current_user.user_id, since=since, unread_only=unread_only
    )


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def read_notification(
    notification_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await mark_as_read(
        db, user_id=current_user.user_id, notification_id=notification_id
    )
