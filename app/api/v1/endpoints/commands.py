"""
Command Generation Routes
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.command import GenerateCommandRequest, GenerateCommandResponse
from app.services import command_service


router = APIRouter(tags=["Commands"])


def client_ip(request: Request) -> Optional[str]:
    """First X-Forwarded-For hop, then X-Real-IP, then the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else None


@router.post(
    "/generate-command",
    response_model=GenerateCommandResponse,
    summary="Generate a project setup script",
)
async def generate_command(
    data: GenerateCommandRequest,
    request: Request,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> GenerateCommandResponse:
    """
    Render the setup script for the chosen package manager and options.

    Raises:
        HTTPException: 400 if the package manager or any option is invalid or inactive.
    """
    return await command_service.generate_command(
        db, current_user, data, ip_address=client_ip(request)
    )
