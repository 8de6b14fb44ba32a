"""
User Schemas

Pydantic models for user request/response validation.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    """Schema for user response (excludes password and code fields)."""
    
    id: uuid.UUID
    email: str
    username: str
    is_admin: bool
    is_email_verified: bool
    profile_image: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None
    github_username: Optional[str] = None
    created_at: datetime
    
    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    """Schema for updating user profile."""
    
    profile_image: Optional[str] = Field(None, max_length=512)
    bio: Optional[str] = Field(None, max_length=500)
    website: Optional[str] = Field(None, max_length=255)
    github_username: Optional[str] = Field(None, max_length=100)
