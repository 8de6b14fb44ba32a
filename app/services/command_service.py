"""
Command Service

Validates a generation request, renders the setup script and records the run.
"""

import logging
import time
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.generated_command import GeneratedCommand
from app.models.package_manager import PackageManager
from app.models.project_option import ProjectOption
from app.models.user import User
from app.schemas.command import (
    GenerateCommandRequest,
    GenerateCommandResponse,
    GenerationMetadata,
    PackageManagerSummary,
)
from app.services.command_generator import generate_command_text, generate_project_structure


logger = logging.getLogger(__name__)


async def generate_command(
    db: AsyncSession,
    user: User,
    data: GenerateCommandRequest,
    ip_address: Optional[str] = None,
) -> GenerateCommandResponse:
    """
    Generate and persist a setup script.

    Args:
        db: Database session.
        user: Authenticated user requesting the script.
        data: Validated request.
        ip_address: Client address, recorded with the run.

    Returns:
        GenerateCommandResponse: Script text, structure preview and metadata.

    Raises:
        HTTPException: 400 if the package manager or any option is missing or inactive.
    """
    started = time.perf_counter()

    pm = await db.get(PackageManager, data.package_manager_id)
    if pm is None or not pm.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or inactive package manager",
        )

    requested_ids = list(dict.fromkeys(data.selected_option_ids))
    options: list[ProjectOption] = []
    if requested_ids:
        result = await db.execute(
            select(ProjectOption)
            .where(ProjectOption.id.in_(requested_ids), ProjectOption.is_active.is_(True))
            .order_by(ProjectOption.sort_order, ProjectOption.name)
        )
        options = list(result.scalars().all())
        if len(options) != len(requested_ids):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Some selected options are invalid or inactive",
            )

    command_text = generate_command_text(
        data.project_name,
        data.project_category,
        pm,
        options,
        data.custom_options,
    )
    structure = generate_project_structure(data.project_name, options)
    generation_time_ms = int((time.perf_counter() - started) * 1000)

    record = GeneratedCommand(
        user_id=user.id,
        package_manager_id=pm.id,
        project_name=data.project_name,
        project_category=data.project_category,
        selected_option_ids=[str(option_id) for option_id in requested_ids],
        custom_options=list(data.custom_options),
        command_text=command_text,
        generation_time_ms=generation_time_ms,
        ip_address=ip_address,
    )
    db.add(record)
    pm.record_usage()
    await db.commit()

    logger.info(
        "Generated command for %s with %s (%d options, %d ms)",
        data.project_name,
        pm.name,
        len(options),
        generation_time_ms,
    )

    return GenerateCommandResponse(
        message="Command generated successfully",
        generation_id=record.id,
        command_text=command_text,
        project_structure=structure,
        metadata=GenerationMetadata(
            project_name=data.project_name,
            project_category=data.project_category,
            package_manager=PackageManagerSummary(name=pm.name, display_name=pm.display_name),
            options_used=len(options),
            custom_options_used=len(data.custom_options),
            generation_time_ms=generation_time_ms,
        ),
    )
