"""
Catalogue Routes

Public listings of categories, package managers and project options.
"""

import enum
import uuid
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.enums import Platform
from app.schemas.catalogue import (
    CategoryListResponse,
    PackageManagerListResponse,
    PackageManagerResponse,
    ProjectOptionListResponse,
    ProjectOptionResponse,
)
from app.schemas.common import Pagination
from app.services import catalogue_service


router = APIRouter(tags=["Catalogue"])


class PackageManagerSort(str, enum.Enum):
    NAME = "name"
    POPULARITY = "popularity"
    USAGE = "usage"
    CREATED_AT = "created_at"


@router.get(
    "/categories",
    response_model=CategoryListResponse,
    summary="List categories",
)
async def list_categories(
    db: Annotated[AsyncSession, Depends(get_db)],
    parent_id: Optional[uuid.UUID] = None,
    include_inactive: bool = False,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> CategoryListResponse:
    """
    List categories ordered by sort order, then name.

    Without ``parent_id`` the result is a tree of root categories with
    nested ``children``; pagination counts roots.
    """
    categories, total = await catalogue_service.list_categories(
        db,
        parent_id=parent_id,
        include_inactive=include_inactive,
        limit=limit,
        offset=offset,
    )
    return CategoryListResponse(
        categories=categories,
        pagination=Pagination.build(total, limit, offset),
    )


@router.get(
    "/package-managers",
    response_model=PackageManagerListResponse,
    summary="List package managers with usage statistics",
)
async def list_package_managers(
    db: Annotated[AsyncSession, Depends(get_db)],
    include_inactive: bool = False,
    platform: Optional[Platform] = None,
    search: Annotated[Optional[str], Query(max_length=100)] = None,
    sort: PackageManagerSort = PackageManagerSort.POPULARITY,
    order: Annotated[str, Query(pattern="^(asc|desc)$")] = "desc",
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PackageManagerListResponse:
    package_managers, stats = await catalogue_service.list_package_managers(
        db,
        include_inactive=include_inactive,
        platform=platform,
        search=search,
        sort=sort.value,
        order=order,
        limit=limit,
    )
    return PackageManagerListResponse(
        package_managers=[PackageManagerResponse.model_validate(pm) for pm in package_managers],
        stats=stats,
    )


@router.get(
    "/project-options",
    response_model=ProjectOptionListResponse,
    summary="List project options for a category and package manager",
)
async def list_project_options(
    category: uuid.UUID,
    package_manager: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProjectOptionListResponse:
    options = await catalogue_service.list_project_options(db, category, package_manager)
    return ProjectOptionListResponse(
        message="Project options fetched successfully",
        options=[ProjectOptionResponse.model_validate(option) for option in options],
    )
