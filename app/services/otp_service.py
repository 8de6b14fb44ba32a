"""
OTP Service

Handles one-time code generation, issuance and verification.

Each user holds at most one outstanding code (``otp_code`` +
``otp_expires_at`` on the user row). Issuing a new code overwrites the
previous one; concurrent issuances race and the last write wins.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import BackgroundTasks
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    ChallengeExpiredError,
    ChallengeMismatchError,
    NoChallengeError,
    UserNotFoundError,
)
from app.core.timeutils import as_utc, utcnow
from app.models.enums import OTPFlow
from app.models.user import User
from app.services.email_service import EmailGateway, render_otp_email


logger = logging.getLogger(__name__)

OTP_LENGTH = 6
_OTP_SPACE = 10 ** OTP_LENGTH


@dataclass(frozen=True)
class Challenge:
    """An issued code, as handed to the delivery step."""
    email: str
    code: str
    flow: OTPFlow
    expires_at: datetime


def generate_otp() -> str:
    """Generate a zero-padded 6-digit code, uniform over 000000-999999."""
    return f"{secrets.randbelow(_OTP_SPACE):0{OTP_LENGTH}d}"


def _expire_delta() -> timedelta:
    return timedelta(minutes=settings.OTP_EXPIRE_MINUTES)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(
        select(User).where(User.email == email.strip().lower())
    )
    return result.scalar_one_or_none()


def resend_cooldown_remaining(user: User) -> Optional[int]:
    """
    Seconds until a new code may be requested, or None if allowed now.

    The issue time is derived from the stored expiry, which is always
    issue time + OTP_EXPIRE_MINUTES.
    """
    if not user.has_challenge:
        return None

    issued_at = as_utc(user.otp_expires_at) - _expire_delta()
    elapsed = (utcnow() - issued_at).total_seconds()
    remaining = int(settings.OTP_RESEND_COOLDOWN_SECONDS - elapsed)

    if remaining <= 0:
        return None
    return remaining


async def issue_challenge(
    db: AsyncSession,
    user: User,
    flow: OTPFlow,
    gateway: EmailGateway,
    background_tasks: Optional[BackgroundTasks] = None,
) -> Challenge:
    """
    Create, store and deliver a new one-time code for the user.

    Any outstanding code is overwritten. Delivery is best-effort: with
    ``background_tasks`` the send runs after the response; otherwise it is
    awaited here. The gateway reports failures in its receipt and never
    raises, so the result does not depend on delivery.

    Args:
        db: Database session.
        user: The identity the code is issued for.
        flow: Selects the email copy (verification or password reset).
        gateway: Delivery gateway.
        background_tasks: Optional FastAPI background task queue.

    Returns:
        Challenge: The issued code and its expiry.
    """
    code = generate_otp()
    expires_at = utcnow() + _expire_delta()

    user.set_challenge(code, expires_at)
    await db.commit()

    challenge = Challenge(
        email=user.email,
        code=code,
        flow=flow,
        expires_at=expires_at,
    )
    logger.info("Issued %s code for %s (expires %s)", flow.value, user.email, expires_at.isoformat())

    message = render_otp_email(
        user.email, code, flow, settings.OTP_EXPIRE_MINUTES
    )
    if background_tasks is not None:
        background_tasks.add_task(gateway.send, message)
    else:
        receipt = await gateway.send(message)
        if not receipt.accepted:
            logger.warning("Code for %s was issued but not delivered: %s", user.email, receipt.error)

    return challenge


async def verify_challenge(
    db: AsyncSession,
    email: str,
    code: str,
) -> User:
    """
    Check a submitted code and consume it on success.

    Raises:
        UserNotFoundError: No account for the email.
        NoChallengeError: No code outstanding.
        ChallengeExpiredError: Current time is past the stored expiry.
        ChallengeMismatchError: Code differs; the stored code stays valid.

    Returns:
        User: The verified user, with the challenge cleared and committed.
    """
    user = await get_user_by_email(db, email)
    if user is None:
        raise UserNotFoundError()

    if not user.has_challenge:
        raise NoChallengeError()

    now = utcnow()
    if now > as_utc(user.otp_expires_at):
        logger.info("Expired code submitted for %s", user.email)
        raise ChallengeExpiredError()

    if not secrets.compare_digest(user.otp_code.encode(), code.encode()):
        user.failed_otp_attempts += 1
        await db.commit()
        logger.info("Code mismatch for %s (%d failed attempts)", user.email, user.failed_otp_attempts)
        raise ChallengeMismatchError()

    user.clear_challenge()
    user.failed_otp_attempts = 0
    if not user.is_email_verified:
        user.is_email_verified = True
        user.email_verified_at = now
    await db.commit()

    logger.info("Code verified for %s", user.email)
    return user
