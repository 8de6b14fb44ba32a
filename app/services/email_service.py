"""
Email Service

Delivery gateway for one-time codes and the HTML bodies for the
verification and password-reset emails.

Delivery is best-effort: ``send`` never raises. The returned receipt says
whether the message was handed to the mail server, only logged (local
development without SMTP credentials), or failed. Acceptance by the SMTP
server does not mean the message reached the inbox.
"""

import asyncio
import enum
import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Protocol

from app.core.config import Settings
from app.core.exceptions import ConfigurationError
from app.models.enums import OTPFlow


logger = logging.getLogger(__name__)


# ============== Delivery Contract ==============

class DeliveryStatus(str, enum.Enum):
    """Outcome of a delivery attempt."""
    ACCEPTED = "ACCEPTED"
    LOGGED = "LOGGED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class EmailMessage:
    to_address: str
    subject: str
    html_body: str
    text_body: Optional[str] = None


@dataclass(frozen=True)
class DeliveryReceipt:
    status: DeliveryStatus
    to_address: str
    error: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.status is not DeliveryStatus.FAILED


class EmailGateway(Protocol):
    async def send(self, message: EmailMessage) -> DeliveryReceipt:
        ...


# ============== Gateways ==============

class SMTPEmailGateway:
    """
    Sends mail through an SMTP server with STARTTLS.

    smtplib is blocking, so the exchange runs in a worker thread.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_address: str,
        from_name: str = "DevKit",
        timeout: float = 10.0,
    ) -> None:
        if not username or not password:
            raise ConfigurationError("SMTP_USER and SMTP_PASSWORD must be set!")
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_address = from_address or username
        self.from_name = from_name
        self.timeout = timeout

    def _build_mime(self, message: EmailMessage) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = f"{self.from_name} <{self.from_address}>"
        msg["To"] = message.to_address
        if message.text_body:
            msg.attach(MIMEText(message.text_body, "plain"))
        msg.attach(MIMEText(message.html_body, "html"))
        return msg

    def _deliver(self, message: EmailMessage) -> None:
        mime = self._build_mime(message)
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            server.starttls()
            server.login(self.username, self.password)
            server.sendmail(self.from_address, message.to_address, mime.as_string())

    async def send(self, message: EmailMessage) -> DeliveryReceipt:
        try:
            await asyncio.to_thread(self._deliver, message)
        except Exception as e:
            # includes UnicodeEncodeError for non-ASCII recipients
            logger.error("Failed to send email to %s: %s", message.to_address, e)
            return DeliveryReceipt(
                status=DeliveryStatus.FAILED,
                to_address=message.to_address,
                error=str(e),
            )

        logger.info("Email '%s' accepted for %s", message.subject, message.to_address)
        return DeliveryReceipt(status=DeliveryStatus.ACCEPTED, to_address=message.to_address)


class ConsoleEmailGateway:
    """Development gateway: writes the message to the log instead of sending it."""

    async def send(self, message: EmailMessage) -> DeliveryReceipt:
        logger.info(
            "[DEV MODE] Email to %s | %s\n%s",
            message.to_address,
            message.subject,
            message.text_body or message.html_body,
        )
        return DeliveryReceipt(status=DeliveryStatus.LOGGED, to_address=message.to_address)


def build_email_gateway(config: Settings) -> EmailGateway:
    """
    Create the gateway for the configured environment.

    Raises:
        ConfigurationError: SMTP credentials missing outside development.
    """
    if config.smtp_configured:
        return SMTPEmailGateway(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            username=config.SMTP_USER,
            password=config.SMTP_PASSWORD,
            from_address=config.EMAIL_FROM_ADDRESS,
            from_name=config.EMAIL_FROM_NAME,
        )
    if config.is_development:
        return ConsoleEmailGateway()
    raise ConfigurationError("SMTP_USER and SMTP_PASSWORD must be set!")


# ============== Templates ==============

_EMAIL_SHELL = """
<div style="max-width: 500px; margin: 0 auto; background-color: #ffffff; padding: 20px; border-radius: 6px;">
  <h2 style="text-align: center; color: #333; margin-bottom: 5px;">{heading}</h2>
  <p style="font-size: 14px; color: #444; text-align: center;">{intro}</p>
  <div style="text-align: center; margin-bottom: 10px;">
    <div style="display: inline-block; padding: 12px 20px; background-color: #f0f0f0; border-radius: 4px;">
      <span style="font-size: 20px; font-weight: bold; color: {accent}; letter-spacing: 4px;">{code}</span>
    </div>
  </div>
  <p style="font-size: 13px; color: #666; text-align: center;">
    This code will expire in {minutes} minutes. Please do not share it with anyone.
  </p>
  <p style="font-size: 12px; color: #999; text-align: center;">{footer}</p>
  <p style="font-size: 12px; color: #999; text-align: center;">&copy; DevKit. All rights reserved.</p>
</div>
"""


def get_verification_email_html(otp_code: str, expire_minutes: int) -> str:
    """Generate HTML content for the account verification email."""
    return _EMAIL_SHELL.format(
        heading="DevKit Email Verification",
        intro="Use the code below to verify your DevKit account.",
        accent="#2563eb",
        code=otp_code,
        minutes=expire_minutes,
        footer="If you didn't create a DevKit account, you can safely ignore this email.",
    )


def get_password_reset_email_html(otp_code: str, expire_minutes: int) -> str:
    """Generate HTML content for the password reset email."""
    return _EMAIL_SHELL.format(
        heading="DevKit Password Reset",
        intro="We received a request to reset your DevKit password. Use the code below to reset it.",
        accent="#6d28d9",
        code=otp_code,
        minutes=expire_minutes,
        footer="If you didn't request a password reset, ignore this email. Your account is still secure.",
    )


_FLOW_COPY = {
    OTPFlow.VERIFY_EMAIL: ("DevKit - Verify Your Account", get_verification_email_html, "verification"),
    OTPFlow.RESET_PASSWORD: ("DevKit - OTP for Password Reset", get_password_reset_email_html, "reset"),
}


def render_otp_email(
    to_address: str,
    otp_code: str,
    flow: OTPFlow,
    expire_minutes: int,
) -> EmailMessage:
    """
    Render the email for a one-time code.

    The two flows differ only in copy; the code format is identical.
    """
    subject, render_html, label = _FLOW_COPY[flow]
    return EmailMessage(
        to_address=to_address,
        subject=subject,
        html_body=render_html(otp_code, expire_minutes),
        text_body=(
            f"Your DevKit {label} code: {otp_code}\n\n"
            f"This code will expire in {expire_minutes} minutes."
        ),
    )
