"""
Catalogue Service

Business logic for categories, package managers and project options.
"""

import logging
import uuid
from collections import Counter
from typing import Optional, Sequence

from fastapi import HTTPException, status
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import LIKE_ESCAPE, contains_pattern
from app.models.category import Category, slugify
from app.models.enums import Platform
from app.models.package_manager import PackageManager
from app.models.project_option import ProjectOption, project_option_categories
from app.models.template import Template
from app.schemas.catalogue import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    PackageManagerCreate,
    PackageManagerStats,
    PlatformCount,
    PopularPackageManager,
    ProjectOptionCreate,
    ProjectOptionUpdate,
)


logger = logging.getLogger(__name__)

NULLABLE_CATEGORY_FIELDS = {"description", "parent_id", "icon", "color"}


# ============== Categories ==============

def build_category_tree(categories: Sequence[Category]) -> list[CategoryResponse]:
    """
    Nest categories under their parents.

    Input order is kept within each level. Categories whose parent is not in
    the input are treated as roots.
    """
    nodes = {category.id: CategoryResponse.model_validate(category) for category in categories}
    roots: list[CategoryResponse] = []
    for category in categories:
        node = nodes[category.id]
        parent = nodes.get(category.parent_id) if category.parent_id else None
        if parent is not None:
            parent.children.append(node)
        else:
            roots.append(node)
    return roots


async def list_categories(
    db: AsyncSession,
    parent_id: Optional[uuid.UUID] = None,
    include_inactive: bool = False,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[CategoryResponse], int]:
    """
    List categories.

    Without ``parent_id`` the whole tree is returned and pagination applies
    to the root categories. With ``parent_id`` the direct children of that
    category are returned flat.

    Returns:
        tuple: (categories, total)
    """
    query = select(Category).order_by(Category.sort_order, Category.name)
    if not include_inactive:
        query = query.where(Category.is_active.is_(True))

    if parent_id is not None:
        query = query.where(Category.parent_id == parent_id)
        result = await db.execute(query)
        children = [CategoryResponse.model_validate(c) for c in result.scalars().all()]
        return children[offset:offset + limit], len(children)

    result = await db.execute(query)
    roots = build_category_tree(result.scalars().all())
    return roots[offset:offset + limit], len(roots)


async def create_category(db: AsyncSession, data: CategoryCreate) -> Category:
    """
    Create a category.

    Raises:
        HTTPException: 400 if the parent does not exist.
        HTTPException: 409 if the slug is already in use.
    """
    slug = data.slug or slugify(data.name)
    if not slug:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Category name must contain letters or numbers",
        )

    existing = await db.execute(select(Category.id).where(Category.slug == slug))
    if existing.first() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Category with this slug already exists",
        )

    if data.parent_id is not None:
        parent = await db.get(Category, data.parent_id)
        if parent is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Parent category not found",
            )

    category = Category(
        name=data.name,
        slug=slug,
        description=data.description,
        parent_id=data.parent_id,
        icon=data.icon,
        color=data.color,
        sort_order=data.sort_order,
        is_active=data.is_active,
        extra=data.metadata,
    )
    db.add(category)
    await db.commit()

    logger.info("Created category %s", slug)
    return category


async def get_category_or_404(db: AsyncSession, category_id: uuid.UUID) -> Category:
    category = await db.get(Category, category_id)
    if category is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found",
        )
    return category


async def update_category(
    db: AsyncSession,
    category_id: uuid.UUID,
    data: CategoryUpdate,
) -> Category:
    """
    Update a category; omitted fields are left unchanged.

    Raises:
        HTTPException: 404 if the category does not exist.
        HTTPException: 400 if the new parent is missing or would create a cycle.
        HTTPException: 409 if the new slug is already in use.
    """
    category = await get_category_or_404(db, category_id)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("slug") and changes["slug"] != category.slug:
        existing = await db.execute(
            select(Category.id).where(Category.slug == changes["slug"], Category.id != category.id)
        )
        if existing.first() is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Category with this slug already exists",
            )

    parent_id = changes.get("parent_id")
    if parent_id is not None:
        # walk up from the new parent; reaching this category means a cycle
        ancestor_id: Optional[uuid.UUID] = parent_id
        while ancestor_id is not None:
            if ancestor_id == category.id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="A category cannot be its own ancestor",
                )
            ancestor = await db.get(Category, ancestor_id)
            if ancestor is None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Parent category not found",
                )
            ancestor_id = ancestor.parent_id

    for field, value in changes.items():
        if field == "metadata":
            category.extra = value or {}
        elif value is not None or field in NULLABLE_CATEGORY_FIELDS:
            setattr(category, field, value)

    await db.commit()
    logger.info("Updated category %s", category.slug)
    return category


async def delete_category(db: AsyncSession, category_id: uuid.UUID) -> None:
    """
    Delete a category.

    Child categories become roots, templates lose their category and the
    category is unlinked from project options.
    """
    category = await get_category_or_404(db, category_id)

    await db.execute(
        update(Category).where(Category.parent_id == category.id).values(parent_id=None)
    )
    await db.execute(
        update(Template).where(Template.category_id == category.id).values(category_id=None)
    )
    await db.execute(
        delete(project_option_categories).where(project_option_categories.c.category_id == category.id)
    )
    await db.delete(category)
    await db.commit()
    logger.info("Deleted category %s", category.slug)


# ============== Package Managers ==============

PACKAGE_MANAGER_SORTS = {
    "name": (PackageManager.name,),
    "popularity": (PackageManager.popularity_score, PackageManager.usage_count),
    "usage": (PackageManager.usage_count,),
    "created_at": (PackageManager.created_at,),
}


def supports_platform(pm: PackageManager, platform: Optional[Platform]) -> bool:
    if platform is None or platform == Platform.ALL:
        return True
    platforms = pm.supported_platforms or []
    return platform.value in platforms or Platform.ALL.value in platforms


async def list_package_managers(
    db: AsyncSession,
    include_inactive: bool = False,
    platform: Optional[Platform] = None,
    search: Optional[str] = None,
    sort: str = "popularity",
    order: str = "desc",
    limit: int = 20,
) -> tuple[list[PackageManager], PackageManagerStats]:
    """
    List package managers with catalogue statistics.

    ``supported_platforms`` is a JSON column, so the platform filter is
    applied after the query.

    Returns:
        tuple: (package_managers, stats)
    """
    query = select(PackageManager)
    if not include_inactive:
        query = query.where(PackageManager.is_active.is_(True))
    if search:
        pattern = contains_pattern(search)
        query = query.where(
            or_(
                PackageManager.name.ilike(pattern, escape=LIKE_ESCAPE),
                PackageManager.display_name.ilike(pattern, escape=LIKE_ESCAPE),
                PackageManager.description.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )

    columns = PACKAGE_MANAGER_SORTS.get(sort, PACKAGE_MANAGER_SORTS["popularity"])
    primary = columns[0].asc() if order == "asc" else columns[0].desc()
    query = query.order_by(primary, *(column.desc() for column in columns[1:]))

    result = await db.execute(query)
    matching = [pm for pm in result.scalars().all() if supports_platform(pm, platform)]
    package_managers = matching[:limit]

    active_count = await db.scalar(
        select(func.count()).select_from(PackageManager).where(PackageManager.is_active.is_(True))
    )
    platform_counts = Counter(
        name for pm in matching for name in (pm.supported_platforms or [])
    )

    stats = PackageManagerStats(
        total=len(matching),
        active=active_count or 0,
        platforms=[
            PlatformCount(platform=name, count=count)
            for name, count in platform_counts.most_common()
        ],
        most_popular=[
            PopularPackageManager(name=pm.display_name, usage_count=pm.usage_count)
            for pm in package_managers[:3]
        ],
    )
    return package_managers, stats


async def create_package_manager(db: AsyncSession, data: PackageManagerCreate) -> PackageManager:
    """
    Create a package manager.

    Raises:
        HTTPException: 409 if the name is already registered.
    """
    existing = await db.execute(select(PackageManager.id).where(PackageManager.name == data.name))
    if existing.first() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Package manager with this name already exists",
        )

    values = data.model_dump()
    values["supported_platforms"] = [platform.value for platform in data.supported_platforms]
    pm = PackageManager(**values)
    db.add(pm)
    await db.commit()

    logger.info("Created package manager %s", pm.name)
    return pm


# ============== Project Options ==============

async def list_project_options(
    db: AsyncSession,
    category_id: uuid.UUID,
    package_manager_id: uuid.UUID,
) -> list[ProjectOption]:
    """Active options linked to both the category and the package manager."""
    result = await db.execute(
        select(ProjectOption)
        .where(
            ProjectOption.is_active.is_(True),
            ProjectOption.categories.any(Category.id == category_id),
            ProjectOption.package_managers.any(PackageManager.id == package_manager_id),
        )
        .order_by(ProjectOption.sort_order, ProjectOption.name)
    )
    return list(result.scalars().all())


async def _resolve_categories(db: AsyncSession, ids: Sequence[uuid.UUID]) -> list[Category]:
    wanted = set(ids)
    categories = (
        await db.execute(select(Category).where(Category.id.in_(wanted)))
    ).scalars().all()
    if len(categories) != len(wanted):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="One or more categories do not exist",
        )
    return list(categories)


async def _resolve_package_managers(db: AsyncSession, ids: Sequence[uuid.UUID]) -> list[PackageManager]:
    wanted = set(ids)
    package_managers = (
        await db.execute(select(PackageManager).where(PackageManager.id.in_(wanted)))
    ).scalars().all()
    if len(package_managers) != len(wanted):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="One or more package managers do not exist",
        )
    return list(package_managers)


async def create_project_option(db: AsyncSession, data: ProjectOptionCreate) -> ProjectOption:
    """
    Create a project option and link it to its categories and package managers.

    Raises:
        HTTPException: 400 if any referenced category or package manager is missing.
    """
    categories = await _resolve_categories(db, data.category_ids)
    package_managers = await _resolve_package_managers(db, data.package_manager_ids)

    option = ProjectOption(
        name=data.name,
        description=data.description,
        option_type=data.option_type,
        command=data.command,
        icon=data.icon,
        is_active=data.is_active,
        sort_order=data.sort_order,
        categories=categories,
        package_managers=package_managers,
    )
    db.add(option)
    await db.commit()

    logger.info("Created project option %s", option.name)
    return option


async def get_project_option_or_404(db: AsyncSession, option_id: uuid.UUID) -> ProjectOption:
    option = await db.get(ProjectOption, option_id)
    if option is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project option not found",
        )
    return option


async def update_project_option(
    db: AsyncSession,
    option_id: uuid.UUID,
    data: ProjectOptionUpdate,
) -> ProjectOption:
    """
    Update a project option. Given id lists replace the current links.

    Raises:
        HTTPException: 404 if the option does not exist.
        HTTPException: 400 if any referenced category or package manager is missing.
    """
    option = await get_project_option_or_404(db, option_id)
    changes = data.model_dump(exclude_unset=True)

    category_ids = changes.pop("category_ids", None)
    if category_ids is not None:
        option.categories = await _resolve_categories(db, category_ids)
    pm_ids = changes.pop("package_manager_ids", None)
    if pm_ids is not None:
        option.package_managers = await _resolve_package_managers(db, pm_ids)

    for field, value in changes.items():
        if value is not None or field == "icon":
            setattr(option, field, value)

    await db.commit()
    logger.info("Updated project option %s", option.name)
    return option


async def delete_project_option(db: AsyncSession, option_id: uuid.UUID) -> None:
    option = await get_project_option_or_404(db, option_id)
    await db.delete(option)
    await db.commit()
    logger.info("Deleted project option %s", option.name)
