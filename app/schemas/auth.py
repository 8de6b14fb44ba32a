"""
Auth Schemas

Pydantic models for registration, one-time code and password reset
request/response validation.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.core.security import is_valid_username, password_problems
from app.models.enums import OTPFlow


OTP_PATTERN = r"^[0-9]{6}$"


def check_username(value: str) -> str:
    value = value.strip().lower()
    if not is_valid_username(value):
        raise ValueError(
            "Username must be 3-20 characters and contain only lowercase letters and numbers"
        )
    return value


def check_password(value: str) -> str:
    problems = password_problems(value)
    if problems:
        raise ValueError(problems[0])
    return value


class RegisterRequest(BaseModel):
    """Schema for account registration."""

    email: EmailStr = Field(..., description="User's email address")
    username: str = Field(..., description="Lowercase letters and digits, 3-20 characters")
    password: str = Field(..., description="8-20 characters with a letter, a number and one of !@#$%&*")

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        return check_username(value)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_password(value)


class OTPRequest(BaseModel):
    """Schema for requesting a new one-time code."""

    email: EmailStr = Field(..., description="User's email address")
    flow: OTPFlow = Field(..., description="verify-email or reset-password")


class VerifyEmailRequest(BaseModel):
    """Schema for email verification request."""
    
    email: EmailStr = Field(..., description="User's email address")
    otp: str = Field(..., pattern=OTP_PATTERN, description="6-digit OTP code")


class ResetPasswordEmailRequest(BaseModel):
    """Schema for requesting a password reset code."""
    
    email: EmailStr = Field(..., description="User's email address")


class ResetPasswordRequest(BaseModel):
    """Schema for reset password request."""
    
    email: EmailStr = Field(..., description="User's email address")
    otp: str = Field(..., pattern=OTP_PATTERN, description="6-digit OTP code")
    new_password: str = Field(..., description="New password")

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, value: str) -> str:
        return check_password(value)


class UsernameAvailabilityResponse(BaseModel):
    available: bool
    message: str


class UsernameSuggestionResponse(BaseModel):
    message: str
    usernames: list[str]
