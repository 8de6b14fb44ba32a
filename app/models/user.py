"""
User Model

Core user entity with authentication and the one-time code challenge.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.core.timeutils import utcnow


class User(Base):
    """
    User model.

    The OTP challenge is stored on the user row: ``otp_code`` and
    ``otp_expires_at`` are always written together through
    ``set_challenge`` / ``clear_challenge``.

    Attributes:
        id: UUID primary key for public-facing identification.
        email: Unique lowercase email address (the OTP identity).
        username: Unique lowercase handle.
        password_hash: bcrypt hash.
        otp_code: Outstanding 6-digit code, or None.
        otp_expires_at: Absolute expiry of otp_code, or None.
        is_email_verified: True once any code has been verified.
        failed_otp_attempts: Mismatches since the last issued code.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    username: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    is_admin: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # Profile
    profile_image: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    github_username: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Email Verification
    is_email_verified: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    email_verified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    otp_code: Mapped[Optional[str]] = mapped_column(
        String(6),
        nullable=True,
    )
    otp_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    failed_otp_attempts: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    @property
    def has_challenge(self) -> bool:
        return self.otp_code is not None and self.otp_expires_at is not None

    def set_challenge(self, code: str, expires_at: datetime) -> None:
        """Replace any outstanding challenge with a new one."""
        self.otp_code = code
        self.otp_expires_at = expires_at
        self.failed_otp_attempts = 0

    def clear_challenge(self) -> None:
        self.otp_code = None
        self.otp_expires_at = None

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, username={self.username})>"
