"""
API Dependencies

Reusable dependencies for API routes: authentication and collaborators.
"""

import uuid
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.security import decode_access_token
from app.models.user import User
from app.services.email_service import EmailGateway, build_email_gateway
from app.services.username_service import UsernameGenerator, build_username_generator


# OAuth2 schemes for token extraction from the Authorization header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")
oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


async def _user_from_token(db: AsyncSession, token: str | None) -> User | None:
    """Resolve a bearer token to its user, or None if anything is off."""
    if not token:
        return None

    payload = decode_access_token(token)
    if payload is None:
        return None

    subject: str | None = payload.get("sub")
    if subject is None:
        return None

    try:
        user_id = uuid.UUID(subject)
    except ValueError:
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Dependency to get the current authenticated user.

    Args:
        token: JWT token from Authorization header (auto-extracted).
        db: Database session (auto-injected).

    Returns:
        User: The authenticated user object.

    Raises:
        HTTPException: 401 if the token is invalid or the user no longer exists.
    """
    user = await _user_from_token(db, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_user_optional(
    token: Annotated[str | None, Depends(oauth2_scheme_optional)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """Like get_current_user, but anonymous requests get None instead of 401."""
    return await _user_from_token(db, token)


async def get_current_admin_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """
    Dependency that restricts a route to administrators.

    Args:
        current_user: User from get_current_user dependency.

    Returns:
        User: The authenticated admin.

    Raises:
        HTTPException: 403 if the user is not an admin.
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


# ============== Collaborators ==============

@lru_cache
def get_email_gateway() -> EmailGateway:
    """Delivery gateway built from settings; overridden in tests."""
    return build_email_gateway(settings)


@lru_cache
def get_username_generator() -> UsernameGenerator:
    """Suggestion generator built from settings; overridden in tests."""
    return build_username_generator(settings)
