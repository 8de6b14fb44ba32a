"""
Bookmark Service

A user's saved templates.
"""

import logging
import uuid
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.bookmark import Bookmark
from app.models.enums import BookmarkPriority, BookmarkStatus
from app.models.user import User
from app.schemas.bookmark import BookmarkCreate, BookmarkSort, BookmarkUpdate
from app.services.template_service import get_visible_template


logger = logging.getLogger(__name__)

# high first
_PRIORITY_RANK = case(
    (Bookmark.priority == BookmarkPriority.HIGH, 0),
    (Bookmark.priority == BookmarkPriority.MEDIUM, 1),
    else_=2,
)

BOOKMARK_SORTS = {
    BookmarkSort.RECENT: (Bookmark.created_at.desc(),),
    BookmarkSort.OLDEST: (Bookmark.created_at.asc(),),
    BookmarkSort.PRIORITY: (_PRIORITY_RANK, Bookmark.created_at.desc()),
    BookmarkSort.ACCESSED: (Bookmark.access_count.desc(), Bookmark.created_at.desc()),
}


async def create_bookmark(db: AsyncSession, user: User, data: BookmarkCreate) -> Bookmark:
    """
    Bookmark a template.

    Raises:
        HTTPException: 404 if the template does not exist or is someone else's draft.
        HTTPException: 409 if it is already bookmarked.
    """
    await get_visible_template(db, data.template_id, user)

    existing = await db.execute(
        select(Bookmark.id).where(
            Bookmark.user_id == user.id,
            Bookmark.template_id == data.template_id,
        )
    )
    if existing.first() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Template already bookmarked",
        )

    bookmark = Bookmark(
        user_id=user.id,
        template_id=data.template_id,
        notes=data.notes,
        is_private=data.is_private,
        priority=data.priority,
    )
    db.add(bookmark)
    await db.commit()
    return bookmark


async def list_bookmarks(
    db: AsyncSession,
    user: User,
    bookmark_status: Optional[BookmarkStatus] = BookmarkStatus.ACTIVE,
    priority: Optional[BookmarkPriority] = None,
    sort: BookmarkSort = BookmarkSort.RECENT,
) -> list[Bookmark]:
    query = select(Bookmark).where(Bookmark.user_id == user.id)
    if bookmark_status is not None:
        query = query.where(Bookmark.status == bookmark_status)
    if priority is not None:
        query = query.where(Bookmark.priority == priority)

    result = await db.execute(query.order_by(*BOOKMARK_SORTS[sort]))
    return list(result.scalars().all())


async def _get_own_bookmark(db: AsyncSession, bookmark_id: uuid.UUID, user: User) -> Bookmark:
    bookmark = await db.get(Bookmark, bookmark_id)
    if bookmark is None or bookmark.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Bookmark not found",
        )
    return bookmark


async def open_bookmark(db: AsyncSession, bookmark_id: uuid.UUID, user: User) -> Bookmark:
    """Fetch one of the user's bookmarks and record the access."""
    bookmark = await _get_own_bookmark(db, bookmark_id, user)
    bookmark.record_access()
    await db.commit()
    return bookmark


async def update_bookmark(
    db: AsyncSession,
    bookmark_id: uuid.UUID,
    user: User,
    data: BookmarkUpdate,
) -> Bookmark:
    """
    Edit notes, privacy, priority or status of one of the user's bookmarks.

    Only ``notes`` can be cleared with null; null for the other fields is ignored.
    """
    bookmark = await _get_own_bookmark(db, bookmark_id, user)

    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field != "notes":
            continue
        setattr(bookmark, field, value)

    await db.commit()
    logger.info("User %s updated bookmark %s", user.id, bookmark.id)
    return bookmark


async def delete_bookmark(db: AsyncSession, bookmark_id: uuid.UUID, user: User) -> None:
    bookmark = await _get_own_bookmark(db, bookmark_id, user)
    await db.delete(bookmark)
    await db.commit()
