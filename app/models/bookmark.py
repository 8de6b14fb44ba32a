"""
Bookmark Model

A user's saved template with notes and priority.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.core.timeutils import utcnow
from app.models.enums import BookmarkPriority, BookmarkStatus


class Bookmark(Base):
    """
    Bookmark model.

    Unique constraint ensures a user bookmarks a template at most once.
    """

    __tablename__ = "bookmarks"

    __table_args__ = (
        UniqueConstraint("user_id", "template_id", name="uq_bookmark_user_template"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    template_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("templates.id", ondelete="CASCADE"),
        nullable=False,
    )
    notes: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    is_private: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    priority: Mapped[BookmarkPriority] = mapped_column(
        Enum(BookmarkPriority, name="bookmark_priority", create_constraint=True),
        default=BookmarkPriority.MEDIUM,
        nullable=False,
    )
    status: Mapped[BookmarkStatus] = mapped_column(
        Enum(BookmarkStatus, name="bookmark_status", create_constraint=True),
        default=BookmarkStatus.ACTIVE,
        nullable=False,
    )
    access_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_accessed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def record_access(self) -> None:
        self.access_count += 1
        self.last_accessed_at = utcnow()

    def __repr__(self) -> str:
        return f"<Bookmark(id={self.id}, user_id={self.user_id}, template_id={self.template_id})>"
