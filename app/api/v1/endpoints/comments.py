"""
Comment Routes
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.comment import (
    CommentCreate,
    CommentListResponse,
    CommentResponse,
    CommentUpdate,
)
from app.schemas.common import MessageResponse, Pagination
from app.services import comment_service


router = APIRouter(prefix="/comments", tags=["Comments"])


@router.get(
    "",
    response_model=CommentListResponse,
    summary="List comments for a template",
)
async def list_comments(
    template_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> CommentListResponse:
    comments, total = await comment_service.list_comments(db, template_id, limit, offset)
    return CommentListResponse(
        comments=[CommentResponse.model_validate(c) for c in comments],
        pagination=Pagination.build(total, limit, offset),
    )


@router.post(
    "",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a template",
)
async def create_comment(
    data: CommentCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CommentResponse:
    """
    Add a comment. The template creator is notified unless they wrote it.

    Raises:
        HTTPException: 404 if the template does not exist.
    """
    comment = await comment_service.create_comment(db, current_user, data)
    return CommentResponse.model_validate(comment)


@router.patch(
    "/{comment_id}",
    response_model=CommentResponse,
    summary="Edit a comment",
)
async def update_comment(
    comment_id: uuid.UUID,
    data: CommentUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CommentResponse:
    """
    Raises:
        HTTPException: 404 if the comment does not exist, 403 unless the current user wrote it.
    """
    comment = await comment_service.update_comment(db, comment_id, current_user, data)
    return CommentResponse.model_validate(comment)


@router.delete(
    "/{comment_id}",
    response_model=MessageResponse,
    summary="Delete a comment",
)
async def delete_comment(
    comment_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    await comment_service.delete_comment(db, comment_id, current_user)
    return MessageResponse(message="Comment deleted successfully")
