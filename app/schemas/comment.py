"""
Comment Schemas
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.common import Pagination


class CommentCreate(BaseModel):
    template_id: uuid.UUID
    comment_text: str = Field(..., min_length=1, max_length=500)

    model_config = {"str_strip_whitespace": True}


class CommentUpdate(BaseModel):
    comment_text: str = Field(..., min_length=1, max_length=500)

    model_config = {"str_strip_whitespace": True}


class CommentResponse(BaseModel):
    id: uuid.UUID
    template_id: uuid.UUID
    user_id: uuid.UUID
    comment_text: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CommentListResponse(BaseModel):
    comments: list[CommentResponse]
    pagination: Pagination
