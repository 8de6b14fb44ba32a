"""
Template Routes

Endpoints for creating, browsing, updating and deleting templates, and for
counting likes, copies and views.
"""

import uuid
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_current_user_optional
from app.core.database import get_db
from app.models.enums import TemplateStatus
from app.models.user import User
from app.schemas.common import MessageResponse, Pagination
from app.schemas.template import (
    SortOrder,
    TemplateCreate,
    TemplateDetailResponse,
    TemplateListResponse,
    TemplateMessageResponse,
    TemplateResponse,
    TemplateSort,
    TemplateStatsResponse,
    TemplateStatsUpdate,
    TemplateUpdate,
)
from app.services import template_service


router = APIRouter(prefix="/templates", tags=["Templates"])


@router.post(
    "",
    response_model=TemplateMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a template",
)
async def create_template(
    data: TemplateCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TemplateMessageResponse:
    """
    Create a template owned by the current user.

    Raises:
        HTTPException: 400 on a duplicate name or an unknown/inactive category.
    """
    template = await template_service.create_template(db, current_user, data)
    return TemplateMessageResponse(
        message="Template created successfully",
        template=TemplateResponse.model_validate(template),
    )


@router.get(
    "",
    response_model=TemplateListResponse,
    summary="Browse templates",
)
async def list_templates(
    db: Annotated[AsyncSession, Depends(get_db)],
    search: Annotated[Optional[str], Query(max_length=100)] = None,
    category: Optional[uuid.UUID] = None,
    creator: Optional[uuid.UUID] = None,
    template_status: Annotated[TemplateStatus, Query(alias="status")] = TemplateStatus.PUBLISHED,
    featured: bool = False,
    sort: TemplateSort = TemplateSort.POPULAR,
    order: SortOrder = SortOrder.DESC,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> TemplateListResponse:
    templates, total = await template_service.list_templates(
        db,
        search=search,
        category_id=category,
        creator_id=creator,
        template_status=template_status,
        featured=featured,
        sort=sort,
        order=order,
        limit=limit,
        offset=offset,
    )
    return TemplateListResponse(
        templates=[TemplateResponse.model_validate(t) for t in templates],
        pagination=Pagination.build(total, limit, offset),
    )


@router.get(
    "/{template_id}",
    response_model=TemplateDetailResponse,
    summary="Get a template with related templates",
)
async def get_template(
    template_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Optional[User], Depends(get_current_user_optional)],
) -> TemplateDetailResponse:
    """
    Get a template.

    Drafts are only visible to their creator. Views by others are counted.
    """
    template, related = await template_service.get_template_detail(db, template_id, current_user)
    return TemplateDetailResponse(
        template=TemplateResponse.model_validate(template),
        related=[TemplateResponse.model_validate(t) for t in related],
    )


@router.patch(
    "/{template_id}",
    response_model=TemplateMessageResponse,
    summary="Update a template",
)
async def update_template(
    template_id: uuid.UUID,
    data: TemplateUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TemplateMessageResponse:
    template = await template_service.update_template(db, template_id, current_user, data)
    return TemplateMessageResponse(
        message="Template updated successfully",
        template=TemplateResponse.model_validate(template),
    )


@router.delete(
    "/{template_id}",
    response_model=MessageResponse,
    summary="Delete a template",
)
async def delete_template(
    template_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    await template_service.delete_template(db, template_id, current_user)
    return MessageResponse(message="Template deleted successfully")


@router.put(
    "/{template_id}/stats",
    response_model=TemplateStatsResponse,
    summary="Record a like, copy or view",
)
async def record_template_activity(
    template_id: uuid.UUID,
    data: TemplateStatsUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TemplateStatsResponse:
    """
    Record an interaction with a template and return its counters.

    Raises:
        HTTPException: 404 if the template is missing or someone else's draft.
        HTTPException: 409 if the user already liked the template.
    """
    template = await template_service.record_activity(db, template_id, current_user, data.activity_type)
    return TemplateStatsResponse(
        template_id=template.id,
        activity_type=data.activity_type,
        likes_count=template.likes_count,
        copies_count=template.copies_count,
        views_count=template.views_count,
    )
