"""
DevKit Backend - Schemas Module

Pydantic models for request/response validation.
"""

from app.schemas.common import MessageResponse, ErrorResponse, Pagination
from app.schemas.token import Token
from app.schemas.user import UserResponse, UserUpdate
from app.schemas.auth import (
    RegisterRequest,
    OTPRequest,
    VerifyEmailRequest,
    ResetPasswordEmailRequest,
    ResetPasswordRequest,
    UsernameAvailabilityResponse,
    UsernameSuggestionResponse,
)

__all__ = [
    # Common
    "MessageResponse",
    "ErrorResponse",
    "Pagination",
    # Token
    "Token",
    # User
    "UserResponse",
    "UserUpdate",
    # Auth
    "RegisterRequest",
    "OTPRequest",
    "VerifyEmailRequest",
    "ResetPasswordEmailRequest",
    "ResetPasswordRequest",
    "UsernameAvailabilityResponse",
    "UsernameSuggestionResponse",
]
