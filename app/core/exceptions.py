"""
Domain Exceptions

Errors raised by the service layer. Each carries the HTTP status and
user-facing message it maps to; app.main renders them as {"error": ...}.
"""

from fastapi import status


class DevKitError(Exception):
    """Base class for DevKit domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)


class ConfigurationError(RuntimeError):
    """Required configuration is missing at startup."""


# ============== OTP Lifecycle ==============

class OTPError(DevKitError):
    """A submitted one-time code was rejected."""

    reason: str = "Invalid"


class UserNotFoundError(OTPError):
    status_code = status.HTTP_404_NOT_FOUND
    reason = "NotFound"
    message = "User not found"


class NoChallengeError(OTPError):
    status_code = status.HTTP_400_BAD_REQUEST
    reason = "NoChallenge"
    message = "No verification code is outstanding. Please request a new code."


class ChallengeExpiredError(OTPError):
    status_code = status.HTTP_410_GONE
    reason = "Expired"
    message = "Verification code has expired. Please request a new code."


class ChallengeMismatchError(OTPError):
    status_code = status.HTTP_401_UNAUTHORIZED
    reason = "Mismatch"
    message = "Invalid verification code"


class ResendCooldownError(DevKitError):
    """A new code was requested before the resend cooldown elapsed."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, retry_after: int) -> None:
        self.retry_after = retry_after
        super().__init__(
            f"Please wait {retry_after} seconds before requesting a new code"
        )


# ============== Collaborators ==============

class SuggestionServiceError(DevKitError):
    """The text-generation collaborator failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    message = "Generating usernames failed!"
