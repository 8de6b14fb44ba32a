"""
Authentication Routes

Handles registration, login, one-time code issuance and verification,
password reset, and username availability/suggestions.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_email_gateway, get_username_generator
from app.core.database import get_db
from app.core.exceptions import ResendCooldownError, UserNotFoundError
from app.core.security import (
    create_access_token,
    hash_password,
    is_valid_username,
    verify_password,
)
from app.core.timeutils import utcnow
from app.models.enums import OTPFlow
from app.models.user import User
from app.schemas.auth import (
    OTPRequest,
    RegisterRequest,
    ResetPasswordEmailRequest,
    ResetPasswordRequest,
    UsernameAvailabilityResponse,
    UsernameSuggestionResponse,
    VerifyEmailRequest,
)
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.token import Token
from app.services import otp_service, username_service
from app.services.email_service import EmailGateway
from app.services.username_service import UsernameGenerator


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

VERIFICATION_SENT = "Verification code sent to your email"
RESET_SENT = "If an account exists with this email, you'll receive a reset code."

OTP_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_410_GONE: {"model": ErrorResponse},
}


async def _request_challenge(
    db: AsyncSession,
    email: str,
    flow: OTPFlow,
    gateway: EmailGateway,
    background_tasks: BackgroundTasks,
) -> MessageResponse:
    """
    Issue a code for ``flow`` after the per-flow checks and the resend cooldown.

    Unknown emails get the generic success message on the reset flow so the
    endpoint does not reveal which emails have accounts.
    """
    user = await otp_service.get_user_by_email(db, email)

    if flow == OTPFlow.VERIFY_EMAIL:
        if user is None:
            raise UserNotFoundError()
        if user.is_email_verified:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already verified",
            )
    elif user is None:
        logger.info("Password reset requested for unknown email")
        return MessageResponse(message=RESET_SENT)

    remaining = otp_service.resend_cooldown_remaining(user)
    if remaining is not None:
        raise ResendCooldownError(remaining)

    await otp_service.issue_challenge(db, user, flow, gateway, background_tasks)

    if flow == OTPFlow.VERIFY_EMAIL:
        return MessageResponse(message=VERIFICATION_SENT)
    return MessageResponse(message=RESET_SENT)


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new account (requires email verification)",
)
async def register(
    data: RegisterRequest,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    gateway: Annotated[EmailGateway, Depends(get_email_gateway)],
) -> MessageResponse:
    """
    Create an account and send an email verification code.

    **Flow:**
    1. Reject emails and usernames held by another account (409)
    2. Create the user, or refresh an unverified registration for the same email
    3. Issue a verify-email code

    Raises:
        HTTPException: 409 if the email or username is taken.
    """
    email = data.email.lower()

    by_email = await otp_service.get_user_by_email(db, email)
    if by_email is not None and by_email.is_email_verified:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists",
        )

    result = await db.execute(select(User).where(User.username == data.username))
    by_username = result.scalar_one_or_none()
    if by_username is not None and by_username is not by_email:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username is already taken",
        )

    if by_email is None:
        user = User(
            email=email,
            username=data.username,
            password_hash=hash_password(data.password),
        )
        db.add(user)
        message = "Account created! Please verify your email with the code we sent."
    else:
        user = by_email
        user.username = data.username
        user.password_hash = hash_password(data.password)
        message = VERIFICATION_SENT

    await otp_service.issue_challenge(db, user, OTPFlow.VERIFY_EMAIL, gateway, background_tasks)
    return MessageResponse(message=message)


@router.post(
    "/login",
    response_model=Token,
    summary="Login and get access token",
)
async def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
    gateway: Annotated[EmailGateway, Depends(get_email_gateway)],
) -> Token:
    """
    Authenticate user and return JWT access token.

    The ``username`` form field carries the email. An unverified account
    gets a fresh verification code (unless one was sent within the resend
    cooldown) and a 403.

    Raises:
        HTTPException: 401 if credentials are invalid.
        HTTPException: 403 if email not verified.
    """
    user = await otp_service.get_user_by_email(db, form_data.username)

    if not user or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_email_verified:
        # Error responses drop background tasks, so deliver inline
        if otp_service.resend_cooldown_remaining(user) is None:
            await otp_service.issue_challenge(db, user, OTPFlow.VERIFY_EMAIL, gateway)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Email not verified. A new verification code has been sent to your email.",
        )

    user.last_login_at = utcnow()
    await db.commit()

    return Token(access_token=create_access_token(subject=user.id))


@router.post(
    "/otp",
    response_model=MessageResponse,
    responses={status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse}},
    summary="Request a new one-time code",
)
async def request_otp(
    data: OTPRequest,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    gateway: Annotated[EmailGateway, Depends(get_email_gateway)],
) -> MessageResponse:
    """
    Issue a new code for the given flow, replacing any outstanding one.

    Raises:
        UserNotFoundError: 404 for an unknown email on the verify-email flow.
        HTTPException: 400 if the email is already verified (verify-email flow).
        ResendCooldownError: 429 if a code was issued within the cooldown.
    """
    return await _request_challenge(db, data.email, data.flow, gateway, background_tasks)


@router.patch(
    "/verify-email",
    response_model=MessageResponse,
    responses=OTP_ERROR_RESPONSES,
    summary="Verify email with OTP code",
)
async def verify_email(
    data: VerifyEmailRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """
    Verify the submitted code and mark the email as verified.

    Failures carry a ``reason``: NotFound, NoChallenge, Expired or Mismatch.
    """
    await otp_service.verify_challenge(db, data.email, data.otp)
    return MessageResponse(message="Email verified successfully")


@router.patch(
    "/reset-password-email",
    response_model=MessageResponse,
    responses={status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse}},
    summary="Request password reset OTP",
)
async def reset_password_email(
    data: ResetPasswordEmailRequest,
    background_tasks: BackgroundTasks,
    db: Annotated[AsyncSession, Depends(get_db)],
    gateway: Annotated[EmailGateway, Depends(get_email_gateway)],
) -> MessageResponse:
    """Send a password reset code. Unknown emails get the same response."""
    return await _request_challenge(
        db, data.email, OTPFlow.RESET_PASSWORD, gateway, background_tasks
    )


@router.put(
    "/reset-password",
    response_model=MessageResponse,
    responses=OTP_ERROR_RESPONSES,
    summary="Reset password with OTP",
)
async def reset_password(
    data: ResetPasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """
    Reset password using OTP verification.

    **Flow:**
    1. Verify (and consume) the code
    2. Store the new password hash
    """
    user = await otp_service.verify_challenge(db, data.email, data.otp)

    user.password_hash = hash_password(data.new_password)
    await db.commit()

    logger.info("Password reset for %s", user.email)
    return MessageResponse(
        message="Password reset successfully. You can now log in with your new password."
    )


@router.get(
    "/check-username",
    response_model=UsernameAvailabilityResponse,
    responses={status.HTTP_409_CONFLICT: {"model": ErrorResponse}},
    summary="Check whether a username is available",
)
async def check_username(
    username: Annotated[str, Query(min_length=1, max_length=50)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UsernameAvailabilityResponse:
    candidate = username.strip().lower()
    if not is_valid_username(candidate):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username must be 3-20 characters and contain only lowercase letters and numbers",
        )

    if await username_service.is_username_taken(db, candidate):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username is already taken",
        )

    return UsernameAvailabilityResponse(available=True, message="Username is available")


@router.get(
    "/suggest-username",
    response_model=UsernameSuggestionResponse,
    responses={status.HTTP_502_BAD_GATEWAY: {"model": ErrorResponse}},
    summary="Suggest available usernames",
)
async def suggest_username(
    db: Annotated[AsyncSession, Depends(get_db)],
    generator: Annotated[UsernameGenerator, Depends(get_username_generator)],
) -> UsernameSuggestionResponse:
    """
    Generate candidate usernames and return the ones that are valid and free.

    The list may be empty. Generator failures return 502.
    """
    usernames = await username_service.suggest_usernames(db, generator)
    return UsernameSuggestionResponse(
        message="Usernames generated successfully",
        usernames=usernames,
    )
