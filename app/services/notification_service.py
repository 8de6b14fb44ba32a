"""
Notification Service

Creating, listing and marking in-app notifications.
"""

import logging
import uuid
from typing import Any, Optional, Sequence

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.timeutils import utcnow
from app.models.enums import NotificationType
from app.models.notification import Notification


logger = logging.getLogger(__name__)


def create_notification(
    db: AsyncSession,
    user_id: uuid.UUID,
    notification_type: NotificationType,
    title: str,
    message: str,
    data: Optional[dict[str, Any]] = None,
    action_url: Optional[str] = None,
) -> Notification:
    """Add a notification to the session; the caller commits."""
    notification = Notification(
        user_id=user_id,
        type=notification_type.value,
        title=title,
        message=message,
        data=data,
        action_url=action_url,
    )
    db.add(notification)
    return notification


async def list_notifications(
    db: AsyncSession,
    user_id: uuid.UUID,
    unread_only: bool = False,
    limit: int = 50,
) -> tuple[list[Notification], int]:
    """
    List a user's unexpired notifications, newest first.

    Returns:
        tuple: (notifications, unread_count)
    """
    not_expired = or_(Notification.expires_at.is_(None), Notification.expires_at > utcnow())

    query = select(Notification).where(Notification.user_id == user_id, not_expired)
    if unread_only:
        query = query.where(Notification.is_read.is_(False))

    result = await db.execute(query.order_by(Notification.created_at.desc()).limit(limit))
    unread_count = await db.scalar(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False), not_expired)
    )
    return list(result.scalars().all()), unread_count or 0


async def mark_as_read(
    db: AsyncSession,
    user_id: uuid.UUID,
    notification_ids: Sequence[uuid.UUID],
) -> int:
    """
    Mark the user's unread notifications among ``notification_ids`` as read.

    Ids belonging to other users are ignored.

    Returns:
        int: Number of notifications that changed.
    """
    result = await db.execute(
        update(Notification)
        .where(
            Notification.id.in_(list(notification_ids)),
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
        .values(is_read=True)
    )
    await db.commit()
    return result.rowcount or 0
