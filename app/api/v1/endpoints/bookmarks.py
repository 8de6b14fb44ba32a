"""
Bookmark Routes
"""

import uuid
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.database import get_db
from app.models.enums import BookmarkPriority, BookmarkStatus
from app.models.user import User
from app.schemas.bookmark import (
    BookmarkCreate,
    BookmarkListResponse,
    BookmarkResponse,
    BookmarkSort,
    BookmarkUpdate,
)
from app.schemas.common import MessageResponse
from app.services import bookmark_service


router = APIRouter(prefix="/bookmarks", tags=["Bookmarks"])


@router.post(
    "",
    response_model=BookmarkResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Bookmark a template",
)
async def create_bookmark(
    data: BookmarkCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookmarkResponse:
    """
    Raises:
        HTTPException: 404 if the template does not exist, 409 if already bookmarked.
    """
    bookmark = await bookmark_service.create_bookmark(db, current_user, data)
    return BookmarkResponse.model_validate(bookmark)


@router.get(
    "",
    response_model=BookmarkListResponse,
    summary="List the current user's bookmarks",
)
async def list_bookmarks(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    bookmark_status: Annotated[BookmarkStatus, Query(alias="status")] = BookmarkStatus.ACTIVE,
    priority: Optional[BookmarkPriority] = None,
    sort: BookmarkSort = BookmarkSort.RECENT,
) -> BookmarkListResponse:
    bookmarks = await bookmark_service.list_bookmarks(
        db, current_user, bookmark_status=bookmark_status, priority=priority, sort=sort
    )
    return BookmarkListResponse(
        bookmarks=[BookmarkResponse.model_validate(b) for b in bookmarks],
        total=len(bookmarks),
    )


@router.get(
    "/{bookmark_id}",
    response_model=BookmarkResponse,
    summary="Open a bookmark",
)
async def get_bookmark(
    bookmark_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookmarkResponse:
    """Fetch one of the current user's bookmarks and record the access."""
    bookmark = await bookmark_service.open_bookmark(db, bookmark_id, current_user)
    return BookmarkResponse.model_validate(bookmark)


@router.put(
    "/{bookmark_id}",
    response_model=BookmarkResponse,
    summary="Edit a bookmark",
)
async def update_bookmark(
    bookmark_id: uuid.UUID,
    data: BookmarkUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookmarkResponse:
    bookmark = await bookmark_service.update_bookmark(db, bookmark_id, current_user, data)
    return BookmarkResponse.model_validate(bookmark)


@router.delete(
    "/{bookmark_id}",
    response_model=MessageResponse,
    summary="Remove a bookmark",
)
async def delete_bookmark(
    bookmark_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    await bookmark_service.delete_bookmark(db, bookmark_id, current_user)
    return MessageResponse(message="Bookmark removed successfully")
