"""
Package Manager Model

Command vocabulary (install/add/dev/build) used when rendering setup scripts.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.core.timeutils import utcnow


POPULARITY_STEP = 0.1
POPULARITY_MAX = 100.0


class PackageManager(Base):
    """
    Package manager model (npm, pnpm, yarn, bun, ...).

    Attributes:
        name: Unique lowercase key, also substituted for ``{{pm}}``.
        install_cmd: Base executable, e.g. ``npm``.
        add_package_cmd: Sub-command that adds a dependency.
        supported_platforms: List of Platform values.
        usage_count: Number of generated commands that used it.
        popularity_score: 0-100, nudged up on every use.
    """

    __tablename__ = "package_managers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    install_cmd: Mapped[str] = mapped_column(String(200), nullable=False)
    add_package_cmd: Mapped[str] = mapped_column(String(200), nullable=False)
    dev_cmd: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    build_cmd: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    icon: Mapped[str] = mapped_column(String(255), nullable=False)
    documentation_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    homepage_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    usage_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    popularity_score: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    supported_platforms: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    features: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def record_usage(self) -> None:
        self.usage_count += 1
        self.popularity_score = min(self.popularity_score + POPULARITY_STEP, POPULARITY_MAX)

    def __repr__(self) -> str:
        return f"<PackageManager(id={self.id}, name={self.name})>"
