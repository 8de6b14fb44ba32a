"""
Security Utilities

Password hashing, credential format rules and JWT token management.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt

from app.core.config import settings


PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 20
PASSWORD_SPECIAL_CHARS = "!@#$%&*"

USERNAME_PATTERN = re.compile(r"^[a-z0-9]{3,20}$")


def is_valid_username(candidate: str) -> bool:
    """Lowercase letters and digits only, 3-20 characters."""
    return bool(USERNAME_PATTERN.fullmatch(candidate))


def password_problems(password: str) -> list[str]:
    """
    List the strength rules a password breaks.

    Args:
        password: Candidate plain text password.

    Returns:
        list[str]: Human-readable messages, empty if the password is acceptable.
    """
    problems = []
    if len(password) < PASSWORD_MIN_LENGTH:
        problems.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters!")
    if len(password) > PASSWORD_MAX_LENGTH:
        problems.append("Password is too long!")
    if not re.search(r"[A-Za-z]", password):
        problems.append("Password needs at least one letter")
    if not re.search(r"[0-9]", password):
        problems.append("Password needs at least one number")
    if not re.search(f"[{re.escape(PASSWORD_SPECIAL_CHARS)}]", password):
        problems.append(
            f"Password needs at least one special character ({PASSWORD_SPECIAL_CHARS})"
        )
    return problems


def hash_password(password: str) -> str:
    """
    Hash a plain text password using bcrypt.

    Args:
        password: Plain text password to hash.

    Returns:
        str: Hashed password.
    """
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """
    Verify a plain text password against a bcrypt hash.

    Accounts without a password hash never match.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        return False


def create_access_token(subject: str | Any, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token.

    Args:
        subject: The subject of the token (the user ID).
        expires_delta: Optional custom expiration time.

    Returns:
        str: Encoded JWT token.
    """
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    return jwt.encode(
        {"sub": str(subject), "exp": expire, "iat": now},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )


def decode_access_token(token: str) -> dict | None:
    """
    Decode and validate a JWT access token.

    Returns:
        dict: Decoded token payload if valid, None otherwise.
    """
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
    except JWTError:
        return None
