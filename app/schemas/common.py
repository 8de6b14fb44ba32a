"""
Common Schemas

Shared response envelopes.
"""

from typing import Optional

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Schema for a plain success message."""

    message: str


class ErrorResponse(BaseModel):
    """Schema for error bodies; ``reason`` is set for rejected one-time codes."""

    error: str
    reason: Optional[str] = None


class Pagination(BaseModel):
    """Schema for offset pagination metadata."""

    total: int
    limit: int
    offset: int
    has_more: bool

    @classmethod
    def build(cls, total: int, limit: int, offset: int) -> "Pagination":
        return cls(total=total, limit=limit, offset=offset, has_more=offset + limit < total)
