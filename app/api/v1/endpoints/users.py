"""
User Routes

Endpoints for the current user's profile.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.user import UserResponse, UserUpdate


router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user profile",
)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get the currently logged-in user's profile."""
    return current_user


@router.patch(
    "/me",
    response_model=UserResponse,
    summary="Update current user profile",
)
async def update_me(
    user_update: UserUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Update profile fields of the current user.

    Only provided fields are updated. Email and username are not editable here.

    Args:
        user_update: Profile fields to change.
        current_user: Authenticated user from dependency.
        db: Database session.

    Returns:
        UserResponse: Updated user profile.
    """
    for field, value in user_update.model_dump(exclude_unset=True).items():
        setattr(current_user, field, value)

    await db.commit()
    return current_user
