"""
Comment Service

Comments on templates. Commenting on someone else's template notifies
its creator.
"""

import logging
import uuid

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.comment import Comment
from app.models.enums import NotificationType
from app.models.user import User
from app.schemas.comment import CommentCreate, CommentUpdate
from app.services.notification_service import create_notification
from app.services.template_service import get_template_or_404


logger = logging.getLogger(__name__)


async def list_comments(
    db: AsyncSession,
    template_id: uuid.UUID,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[Comment], int]:
    """
    List comments for a template, newest first.

    Returns:
        tuple: (comments, total)
    """
    total = await db.scalar(
        select(func.count()).select_from(Comment).where(Comment.template_id == template_id)
    )
    result = await db.execute(
        select(Comment)
        .where(Comment.template_id == template_id)
        .order_by(Comment.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def create_comment(db: AsyncSession, user: User, data: CommentCreate) -> Comment:
    """
    Add a comment to a template.

    Raises:
        HTTPException: 404 if the template does not exist.
    """
    template = await get_template_or_404(db, data.template_id)

    comment = Comment(
        template_id=template.id,
        user_id=user.id,
        comment_text=data.comment_text,
    )
    db.add(comment)

    if template.creator_id != user.id:
        create_notification(
            db,
            user_id=template.creator_id,
            notification_type=NotificationType.COMMENT,
            title="New comment on your template",
            message=f"{user.username} commented on {template.name}",
            data={"template_id": str(template.id), "commenter_id": str(user.id)},
            action_url=f"/templates/{template.id}",
        )

    await db.commit()
    logger.info("User %s commented on template %s", user.id, template.id)
    return comment


async def _get_comment_or_404(db: AsyncSession, comment_id: uuid.UUID) -> Comment:
    comment = await db.get(Comment, comment_id)
    if comment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found",
        )
    return comment


async def update_comment(
    db: AsyncSession,
    comment_id: uuid.UUID,
    user: User,
    data: CommentUpdate,
) -> Comment:
    """
    Edit the text of a comment.

    Raises:
        HTTPException: 404 if the comment does not exist.
        HTTPException: 403 unless the user wrote it.
    """
    comment = await _get_comment_or_404(db, comment_id)
    if comment.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only edit your own comments",
        )

    comment.comment_text = data.comment_text
    await db.commit()
    logger.info("User %s edited comment %s", user.id, comment.id)
    return comment


async def delete_comment(db: AsyncSession, comment_id: uuid.UUID, user: User) -> None:
    """
    Delete a comment.

    Raises:
        HTTPException: 404 if the comment does not exist.
        HTTPException: 403 unless the user wrote it or is an admin.
    """
    comment = await _get_comment_or_404(db, comment_id)
    if comment.user_id != user.id and not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only delete your own comments",
        )

    await db.delete(comment)
    await db.commit()
