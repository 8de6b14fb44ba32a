"""
Template Schemas

Pydantic models for template request/response validation.
"""

import enum
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.enums import TemplateActivity, TemplateStatus
from app.schemas.common import Pagination


class TemplateSort(str, enum.Enum):
    POPULAR = "popular"
    RECENT = "recent"
    NAME = "name"
    VIEWS = "views"


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class TemplateCreate(BaseModel):
    """Schema for creating a template."""

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    content: str = Field(..., min_length=1, max_length=50000)
    category_id: Optional[uuid.UUID] = None
    status: TemplateStatus = TemplateStatus.DRAFT


class TemplateUpdate(BaseModel):
    """Schema for updating a template; omitted fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    content: Optional[str] = Field(None, min_length=1, max_length=50000)
    category_id: Optional[uuid.UUID] = None
    status: Optional[TemplateStatus] = None


class TemplateResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    content: str
    creator_id: uuid.UUID
    category_id: Optional[uuid.UUID] = None
    status: TemplateStatus
    copies_count: int
    likes_count: int
    views_count: int
    featured_until: Optional[datetime] = None
    last_updated: datetime
    created_at: datetime

    model_config = {"from_attributes": True}


class TemplateMessageResponse(BaseModel):
    message: str
    template: TemplateResponse


class TemplateListResponse(BaseModel):
    templates: list[TemplateResponse]
    pagination: Pagination


class TemplateDetailResponse(BaseModel):
    template: TemplateResponse
    related: list[TemplateResponse]


class TemplateStatsUpdate(BaseModel):
    """Schema for recording a like, copy or view."""

    activity_type: TemplateActivity


class TemplateStatsResponse(BaseModel):
    template_id: uuid.UUID
    activity_type: TemplateActivity
    likes_count: int
    copies_count: int
    views_count: int
