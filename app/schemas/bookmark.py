"""
Bookmark Schemas

Pydantic models for bookmark request/response validation.
"""

import enum
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.enums import BookmarkPriority, BookmarkStatus


class BookmarkSort(str, enum.Enum):
    RECENT = "recent"
    OLDEST = "oldest"
    PRIORITY = "priority"
    ACCESSED = "accessed"


class BookmarkCreate(BaseModel):
    """Schema for bookmarking a template."""

    template_id: uuid.UUID
    notes: Optional[str] = Field(None, max_length=1000)
    is_private: bool = True
    priority: BookmarkPriority = BookmarkPriority.MEDIUM


class BookmarkUpdate(BaseModel):
    """Schema for editing a bookmark; omitted fields are left unchanged."""

    notes: Optional[str] = Field(None, max_length=1000)
    is_private: Optional[bool] = None
    priority: Optional[BookmarkPriority] = None
    status: Optional[BookmarkStatus] = None


class BookmarkResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    template_id: uuid.UUID
    notes: Optional[str] = None
    is_private: bool
    priority: BookmarkPriority
    status: BookmarkStatus
    access_count: int
    last_accessed_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class BookmarkListResponse(BaseModel):
    bookmarks: list[BookmarkResponse]
    total: int
