"""
Template Service

Business logic for creating, browsing and editing templates.
"""

import logging
import uuid
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import LIKE_ESCAPE, contains_pattern
from app.core.timeutils import utcnow
from app.models.category import Category
from app.models.enums import NotificationType, TemplateActivity, TemplateStatus
from app.models.template import Template
from app.models.template_like import TemplateLike
from app.models.user import User
from app.schemas.template import SortOrder, TemplateCreate, TemplateSort, TemplateUpdate
from app.services.notification_service import create_notification


logger = logging.getLogger(__name__)

RELATED_LIMIT = 4

TEMPLATE_SORTS = {
    TemplateSort.POPULAR: Template.copies_count,
    TemplateSort.RECENT: Template.created_at,
    TemplateSort.NAME: Template.name,
    TemplateSort.VIEWS: Template.views_count,
}


async def _get_active_category(db: AsyncSession, category_id: uuid.UUID) -> Category:
    category = await db.get(Category, category_id)
    if category is None or not category.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or inactive category",
        )
    return category


async def _name_taken(
    db: AsyncSession,
    creator_id: uuid.UUID,
    name: str,
    exclude_id: Optional[uuid.UUID] = None,
) -> bool:
    query = select(Template.id).where(Template.creator_id == creator_id, Template.name == name)
    if exclude_id is not None:
        query = query.where(Template.id != exclude_id)
    return (await db.execute(query)).first() is not None


async def get_template_or_404(db: AsyncSession, template_id: uuid.UUID) -> Template:
    template = await db.get(Template, template_id)
    if template is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Template not found",
        )
    return template


async def get_visible_template(
    db: AsyncSession,
    template_id: uuid.UUID,
    viewer: Optional[User],
) -> Template:
    """Fetch a template, treating other users' drafts as missing."""
    template = await get_template_or_404(db, template_id)
    if template.status == TemplateStatus.DRAFT and (viewer is None or viewer.id != template.creator_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Template not found",
        )
    return template


async def create_template(db: AsyncSession, user: User, data: TemplateCreate) -> Template:
    """
    Create a template owned by the user.

    Raises:
        HTTPException: 400 if the user already has a template with this name.
        HTTPException: 400 if the category is unknown or inactive.
    """
    if await _name_taken(db, user.id, data.name):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You already have a template with this name",
        )

    category = None
    if data.category_id is not None:
        category = await _get_active_category(db, data.category_id)

    template = Template(
        name=data.name,
        description=data.description,
        content=data.content,
        creator_id=user.id,
        category_id=data.category_id,
        status=data.status,
    )
    db.add(template)
    if category is not None:
        category.template_count += 1
    await db.commit()

    logger.info("User %s created template %s", user.id, template.id)
    return template


async def list_templates(
    db: AsyncSession,
    search: Optional[str] = None,
    category_id: Optional[uuid.UUID] = None,
    creator_id: Optional[uuid.UUID] = None,
    template_status: TemplateStatus = TemplateStatus.PUBLISHED,
    featured: bool = False,
    sort: TemplateSort = TemplateSort.POPULAR,
    order: SortOrder = SortOrder.DESC,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Template], int]:
    """
    Browse templates.

    Returns:
        tuple: (templates, total)
    """
    conditions = [Template.status == template_status]
    if search:
        pattern = contains_pattern(search)
        conditions.append(
            or_(
                Template.name.ilike(pattern, escape=LIKE_ESCAPE),
                Template.description.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    if category_id is not None:
        conditions.append(Template.category_id == category_id)
    if creator_id is not None:
        conditions.append(Template.creator_id == creator_id)
    if featured:
        conditions.append(Template.featured_until >= utcnow())

    total = await db.scalar(select(func.count()).select_from(Template).where(*conditions))

    column = TEMPLATE_SORTS[sort]
    result = await db.execute(
        select(Template)
        .where(*conditions)
        .order_by(column.asc() if order == SortOrder.ASC else column.desc(), Template.id)
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def get_template_detail(
    db: AsyncSession,
    template_id: uuid.UUID,
    viewer: Optional[User],
) -> tuple[Template, list[Template]]:
    """
    Fetch a template for display.

    Drafts are only visible to their creator. Views by anyone other than
    the creator increment ``views_count``.

    Returns:
        tuple: (template, related published templates)
    """
    template = await get_visible_template(db, template_id, viewer)
    is_creator = viewer is not None and viewer.id == template.creator_id

    if not is_creator:
        template.views_count += 1
        await db.commit()

    related_filter = Template.creator_id == template.creator_id
    if template.category_id is not None:
        related_filter = or_(related_filter, Template.category_id == template.category_id)

    result = await db.execute(
        select(Template)
        .where(
            Template.id != template.id,
            Template.status == TemplateStatus.PUBLISHED,
            related_filter,
        )
        .order_by(Template.copies_count.desc(), Template.created_at.desc())
        .limit(RELATED_LIMIT)
    )
    return template, list(result.scalars().all())


_ACTIVITY_NOTIFICATIONS = {
    TemplateActivity.LIKE: (NotificationType.TEMPLATE_LIKED, "Someone liked your template", "liked"),
    TemplateActivity.COPY: (NotificationType.TEMPLATE_COPIED, "Someone copied your template", "copied"),
}


async def record_activity(
    db: AsyncSession,
    template_id: uuid.UUID,
    user: User,
    activity: TemplateActivity,
) -> Template:
    """
    Count a like, copy or view of a template.

    A user can like a template once. Views by the creator are not counted,
    matching ``get_template_detail``. Likes and copies by anyone other than
    the creator notify the creator.

    Raises:
        HTTPException: 404 if the template does not exist or is someone else's draft.
        HTTPException: 409 if the user already liked the template.
    """
    template = await get_visible_template(db, template_id, user)
    is_creator = user.id == template.creator_id

    if activity == TemplateActivity.LIKE:
        existing = await db.execute(
            select(TemplateLike.id).where(
                TemplateLike.user_id == user.id,
                TemplateLike.template_id == template.id,
            )
        )
        if existing.first() is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Template already liked",
            )
        db.add(TemplateLike(user_id=user.id, template_id=template.id))
        template.likes_count += 1
    elif activity == TemplateActivity.COPY:
        template.copies_count += 1
    elif not is_creator:
        template.views_count += 1

    if activity in _ACTIVITY_NOTIFICATIONS and not is_creator:
        notification_type, title, verb = _ACTIVITY_NOTIFICATIONS[activity]
        create_notification(
            db,
            user_id=template.creator_id,
            notification_type=notification_type,
            title=title,
            message=f"{user.username} {verb} your template \"{template.name}\"",
            data={"template_id": str(template.id), "actor_id": str(user.id)},
            action_url=f"/templates/{template.id}",
        )

    await db.commit()
    logger.info("User %s recorded %s on template %s", user.id, activity.value, template.id)
    return template


async def update_template(
    db: AsyncSession,
    template_id: uuid.UUID,
    user: User,
    data: TemplateUpdate,
) -> Template:
    """
    Update a template owned by the user.

    Raises:
        HTTPException: 404 if the template does not exist.
        HTTPException: 403 if the user is not the creator.
        HTTPException: 400 on a duplicate name or an invalid category.
    """
    template = await get_template_or_404(db, template_id)
    if template.creator_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only update your own templates",
        )

    changes = data.model_dump(exclude_unset=True)

    if "name" in changes and await _name_taken(db, user.id, changes["name"], exclude_id=template.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You already have a template with this name",
        )

    if changes.get("category_id") is not None and changes["category_id"] != template.category_id:
        new_category = await _get_active_category(db, changes["category_id"])
        new_category.template_count += 1
        if template.category_id is not None:
            old_category = await db.get(Category, template.category_id)
            if old_category is not None and old_category.template_count > 0:
                old_category.template_count -= 1

    for field, value in changes.items():
        if field == "category_id" and value is None:
            continue
        setattr(template, field, value)

    if {"name", "description", "content"} & changes.keys():
        template.last_updated = utcnow()

    await db.commit()
    logger.info("User %s updated template %s", user.id, template.id)
    return template


async def delete_template(db: AsyncSession, template_id: uuid.UUID, user: User) -> None:
    """
    Delete a template.

    Raises:
        HTTPException: 403 unless the user is the creator or an admin.
    """
    template = await get_template_or_404(db, template_id)
    if template.creator_id != user.id and not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only delete your own templates",
        )

    if template.category_id is not None:
        category = await db.get(Category, template.category_id)
        if category is not None and category.template_count > 0:
            category.template_count -= 1

    await db.delete(template)
    await db.commit()
    logger.info("User %s deleted template %s", user.id, template_id)
