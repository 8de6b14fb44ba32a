"""
Admin Routes

Catalogue management, restricted to administrators.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin_user
from app.core.database import get_db
from app.schemas.catalogue import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    PackageManagerCreate,
    PackageManagerResponse,
    ProjectOptionCreate,
    ProjectOptionResponse,
    ProjectOptionUpdate,
)
from app.schemas.common import MessageResponse
from app.services import catalogue_service


router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(get_current_admin_user)],
)


@router.post(
    "/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
)
async def create_category(
    data: CategoryCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CategoryResponse:
    """
    Create a category. The slug defaults to the slugified name.

    Raises:
        HTTPException: 400 if the parent does not exist, 409 on a duplicate slug.
    """
    category = await catalogue_service.create_category(db, data)
    return CategoryResponse.model_validate(category)


@router.patch(
    "/categories/{category_id}",
    response_model=CategoryResponse,
    summary="Update a category",
)
async def update_category(
    category_id: uuid.UUID,
    data: CategoryUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CategoryResponse:
    """
    Raises:
        HTTPException: 404 if the category does not exist.
        HTTPException: 400 if the parent is missing or would create a cycle.
        HTTPException: 409 on a duplicate slug.
    """
    category = await catalogue_service.update_category(db, category_id, data)
    return CategoryResponse.model_validate(category)


@router.delete(
    "/categories/{category_id}",
    response_model=MessageResponse,
    summary="Delete a category",
)
async def delete_category(
    category_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Delete a category. Its children become root categories."""
    await catalogue_service.delete_category(db, category_id)
    return MessageResponse(message="Category deleted successfully")


@router.post(
    "/package-managers",
    response_model=PackageManagerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a package manager",
)
async def create_package_manager(
    data: PackageManagerCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PackageManagerResponse:
    pm = await catalogue_service.create_package_manager(db, data)
    return PackageManagerResponse.model_validate(pm)


@router.post(
    "/project-options",
    response_model=ProjectOptionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project option",
)
async def create_project_option(
    data: ProjectOptionCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProjectOptionResponse:
    option = await catalogue_service.create_project_option(db, data)
    return ProjectOptionResponse.model_validate(option)


@router.put(
    "/project-options/{option_id}",
    response_model=ProjectOptionResponse,
    summary="Update a project option",
)
async def update_project_option(
    option_id: uuid.UUID,
    data: ProjectOptionUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProjectOptionResponse:
    option = await catalogue_service.update_project_option(db, option_id, data)
    return ProjectOptionResponse.model_validate(option)


@router.delete(
    "/project-options/{option_id}",
    response_model=MessageResponse,
    summary="Delete a project option",
)
async def delete_project_option(
    option_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    await catalogue_service.delete_project_option(db, option_id)
    return MessageResponse(message="Project option deleted successfully")
