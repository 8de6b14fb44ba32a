"""
Generated Command Model

Audit record of every setup script rendered by the command generator.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.core.timeutils import utcnow


class GeneratedCommand(Base):
    __tablename__ = "generated_commands"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    package_manager_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("package_managers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    project_name: Mapped[str] = mapped_column(String(100), nullable=False)
    project_category: Mapped[str] = mapped_column(String(100), nullable=False)
    selected_option_ids: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    custom_options: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    command_text: Mapped[str] = mapped_column(Text, nullable=False)
    generation_time_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<GeneratedCommand(id={self.id}, project={self.project_name})>"
