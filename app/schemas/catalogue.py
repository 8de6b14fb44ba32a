"""
Catalogue Schemas

Pydantic models for categories, package managers and project options.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from app.models.enums import OptionType, Platform
from app.schemas.common import Pagination


HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


# ============== Category Schemas ==============

class CategoryCreate(BaseModel):
    """Schema for creating a category; ``slug`` defaults to the slugified name."""

    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=100, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = Field(None, max_length=500)
    parent_id: Optional[uuid.UUID] = None
    icon: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    sort_order: int = Field(default=0, ge=0)
    is_active: bool = True
    metadata: dict[str, Any] = Field(default_factory=dict)


class CategoryUpdate(BaseModel):
    """Schema for updating a category; omitted fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=100, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = Field(None, max_length=500)
    parent_id: Optional[uuid.UUID] = None
    icon: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    sort_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    metadata: Optional[dict[str, Any]] = None


class CategoryResponse(BaseModel):
    """Schema for a category, with nested children in tree listings."""

    id: uuid.UUID
    name: str
    slug: str
    description: Optional[str] = None
    parent_id: Optional[uuid.UUID] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    sort_order: int
    is_active: bool
    template_count: int
    created_at: datetime
    children: list["CategoryResponse"] = []

    model_config = {"from_attributes": True}


class CategoryListResponse(BaseModel):
    categories: list[CategoryResponse]
    pagination: Pagination


# ============== Package Manager Schemas ==============

class PackageManagerCreate(BaseModel):
    """Schema for creating a package manager."""

    name: str = Field(..., min_length=1, max_length=50)
    display_name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    install_cmd: str = Field(..., min_length=1, max_length=200)
    add_package_cmd: str = Field(..., min_length=1, max_length=200)
    dev_cmd: Optional[str] = Field(None, max_length=200)
    build_cmd: Optional[str] = Field(None, max_length=200)
    icon: str = Field(..., min_length=1, max_length=255)
    documentation_url: Optional[str] = Field(None, max_length=512)
    homepage_url: Optional[str] = Field(None, max_length=512)
    is_active: bool = True
    supported_platforms: list[Platform] = Field(default_factory=lambda: [Platform.ALL])
    features: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        return value.strip().lower()


class PackageManagerResponse(BaseModel):
    id: uuid.UUID
    name: str
    display_name: str
    description: str
    install_cmd: str
    add_package_cmd: str
    dev_cmd: Optional[str] = None
    build_cmd: Optional[str] = None
    icon: str
    documentation_url: Optional[str] = None
    homepage_url: Optional[str] = None
    is_active: bool
    usage_count: int
    popularity_score: float
    supported_platforms: list[str]
    features: list[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class PlatformCount(BaseModel):
    platform: str
    count: int


class PopularPackageManager(BaseModel):
    name: str
    usage_count: int


class PackageManagerStats(BaseModel):
    total: int
    active: int
    platforms: list[PlatformCount]
    most_popular: list[PopularPackageManager]


class PackageManagerListResponse(BaseModel):
    package_managers: list[PackageManagerResponse]
    stats: PackageManagerStats


# ============== Project Option Schemas ==============

class ProjectOptionCreate(BaseModel):
    """Schema for creating a project option."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    option_type: OptionType = OptionType.SETUP
    command: str = Field(..., min_length=1, max_length=1000)
    icon: Optional[str] = Field(None, max_length=10)
    category_ids: list[uuid.UUID] = Field(..., min_length=1)
    package_manager_ids: list[uuid.UUID] = Field(..., min_length=1)
    is_active: bool = True
    sort_order: int = Field(default=0, ge=0)


class ProjectOptionUpdate(BaseModel):
    """Schema for updating a project option; omitted fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    option_type: Optional[OptionType] = None
    command: Optional[str] = Field(None, min_length=1, max_length=1000)
    icon: Optional[str] = Field(None, max_length=10)
    category_ids: Optional[list[uuid.UUID]] = Field(None, min_length=1)
    package_manager_ids: Optional[list[uuid.UUID]] = Field(None, min_length=1)
    is_active: Optional[bool] = None
    sort_order: Optional[int] = Field(None, ge=0)


class ProjectOptionResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str
    option_type: OptionType
    command: str
    icon: Optional[str] = None
    is_active: bool
    sort_order: int
    category_ids: list[uuid.UUID]
    package_manager_ids: list[uuid.UUID]

    model_config = {"from_attributes": True}


class ProjectOptionListResponse(BaseModel):
    message: str
    options: list[ProjectOptionResponse]
