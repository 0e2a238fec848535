"""Notification creation and feed queries."""

from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException, status
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.communications_service.models import Notification, NotificationType
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

FEED_LIMIT = 50


async def create_notification(
    db: AsyncSession,
    *,
    user_id: str,
    type: NotificationType,
    title: str,
    body: str,
    action_url: Optional[str] = None,
    commit: bool = True,
) -> Notification:
    """Add a notification. With ``commit=False`` it joins the caller's unit of work."""
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        body=body,
        action_url=action_url,
    )
    db.add(notification)
    if not commit:
        await db.flush()
        return notification
    await db.commit()
    await db.refresh(notification)
    return notification


async def notify(
    db: AsyncSession,
    *,
    user_id: str,
    type: NotificationType,
    title: str,
    body: str,
    action_url: Optional[str] = None,
) -> Optional[Notification]:
    """Fire-and-forget wrapper: a failure here never fails the caller's action.

    Call only after the caller's own state change has been committed.
    """
    if not user_id:
        return None
    try:
        return await create_notification(
            db,
            user_id=user_id,
            type=type,
            title=title,
            body=body,
            action_url=action_url,
        )
    except Exception as e:
        await db.rollback()
        logger.error("Failed to create %s notification for %s: %s", type.value, user_id, e)
        return None


async def list_notifications(
    db: AsyncSession,
    user_id: str,
    *,
    since: Optional[datetime] = None,
    unread_only: bool = False,
    limit: int = FEED_LIMIT,
) -> List[Notification]:
    """Newest-first feed. ``since`` lets clients poll for changes."""
    query = select(Notification).where(Notification.user_id == user_id)
    if since is not None:
        query = query.where(Notification.created_at > since)
    if unread_only:
        query = query.where(Notification.is_read.is_(False))
    query = query.order_by(Notification.created_at.desc()).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def mark_as_read(db: AsyncSession, *, user_id: str, notification_id: str) -> Notification:
    result = await db.execute(
        select(Notification).where(Notification.id == notification_id)
    )
    notification = result.scalar_one_or_none()
    if not notification or notification.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found"
        )
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utc_now()
        await db.commit()
        await db.refresh(notification)
    return notification
