"""
Project Option Model

A selectable setup step (folder, package, config file, ...) linked to the
categories and package managers it applies to.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.core.timeutils import utcnow
from app.models.enums import OptionType

if TYPE_CHECKING:
    from app.models.category import Category
    from app.models.package_manager import PackageManager


project_option_categories = Table(
    "project_option_categories",
    Base.metadata,
    Column("project_option_id", Uuid, ForeignKey("project_options.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Uuid, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)

project_option_package_managers = Table(
    "project_option_package_managers",
    Base.metadata,
    Column("project_option_id", Uuid, ForeignKey("project_options.id", ondelete="CASCADE"), primary_key=True),
    Column("package_manager_id", Uuid, ForeignKey("package_managers.id", ondelete="CASCADE"), primary_key=True),
)


class ProjectOption(Base):
    """
    Project option model.

    Attributes:
        option_type: Section of the generated script the command goes into.
        command: Shell command, may contain ``{{projectName}}`` / ``{{pm.*}}``.
        sort_order: Position within its section.
    """

    __tablename__ = "project_options"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    option_type: Mapped[OptionType] = mapped_column(
        Enum(OptionType, name="option_type", create_constraint=True),
        default=OptionType.SETUP,
        nullable=False,
    )
    command: Mapped[str] = mapped_column(String(1000), nullable=False)
    icon: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    # Relationships
    categories: Mapped[list["Category"]] = relationship(
        "Category",
        secondary=project_option_categories,
        lazy="selectin",
    )
    package_managers: Mapped[list["PackageManager"]] = relationship(
        "PackageManager",
        secondary=project_option_package_managers,
        lazy="selectin",
    )

    @property
    def category_ids(self) -> list[uuid.UUID]:
        return [category.id for category in self.categories]

    @property
    def package_manager_ids(self) -> list[uuid.UUID]:
        return [pm.id for pm in self.package_managers]

    def __repr__(self) -> str:
        return f"<ProjectOption(id={self.id}, name={self.name}, type={self.option_type})>"
