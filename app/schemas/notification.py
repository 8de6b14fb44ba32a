"""
Notification Schemas
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class NotificationResponse(BaseModel):
    id: uuid.UUID
    type: str
    title: str
    message: str
    data: Optional[dict[str, Any]] = None
    is_read: bool
    action_url: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int


class MarkReadRequest(BaseModel):
    """Schema for marking notifications as read."""

    notification_ids: list[uuid.UUID] = Field(..., min_length=1, max_length=100)


class MarkReadResponse(BaseModel):
    message: str
    modified_count: int
