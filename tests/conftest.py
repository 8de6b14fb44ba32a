"""
Pytest Configuration and Fixtures

Provides an in-memory database, collaborator fakes, a controllable clock
and an HTTP client bound to the DevKit Backend app.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")

import re
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Optional, Union

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.deps import get_email_gateway, get_username_generator
from app.core.database import Base, get_db
from app.core.security import create_access_token, hash_password
from app.main import app
from app.models.user import User
from app.services.email_service import DeliveryReceipt, DeliveryStatus, EmailMessage


DEFAULT_PASSWORD = "Secret12!"


# ==================== Collaborator Fakes ====================

class RecordingGateway:
    """Email gateway that keeps every message instead of sending it."""

    def __init__(self, status: DeliveryStatus = DeliveryStatus.ACCEPTED):
        self.status = status
        self.sent: list[EmailMessage] = []

    async def send(self, message: EmailMessage) -> DeliveryReceipt:
        self.sent.append(message)
        error = "connection refused" if self.status is DeliveryStatus.FAILED else None
        return DeliveryReceipt(status=self.status, to_address=message.to_address, error=error)

    def last_code(self, to_address: Optional[str] = None) -> str:
        messages = [m for m in self.sent if to_address is None or m.to_address == to_address]
        assert messages, "no email was sent"
        match = re.search(r"code: (\d{6})", messages[-1].text_body or "")
        assert match, "email did not contain a code"
        return match.group(1)


class FakeUsernameGenerator:
    """Returns canned text, or raises the given exception."""

    def __init__(self, response: Union[str, Exception] = ""):
        self.response = response
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


class Clock:
    """Mutable stand-in for utcnow."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# ==================== Database Fixtures ====================

@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    session_maker = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    async with session_maker() as session:
        yield session


# ==================== Collaborator Fixtures ====================

@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def username_generator() -> FakeUsernameGenerator:
    return FakeUsernameGenerator("codeluffy\nzoro\nquantum42")


@pytest.fixture
def clock(monkeypatch) -> Clock:
    """Freeze the OTP service clock; advance it with ``clock.advance(...)``."""
    fake = Clock(datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc))
    monkeypatch.setattr("app.services.otp_service.utcnow", fake)
    return fake


# ==================== User Fixtures ====================

@pytest_asyncio.fixture
async def make_user(db_session):
    """
    Factory fixture to create users.

    Usage:
        user = await make_user("alice@devkit.dev", "alice", verified=True)
    """
    async def _create_user(
        email: str = "alice@devkit.dev",
        username: str = "alice",
        password: str = DEFAULT_PASSWORD,
        verified: bool = True,
        is_admin: bool = False,
    ) -> User:
        user = User(
            email=email,
            username=username,
            password_hash=hash_password(password),
            is_email_verified=verified,
            is_admin=is_admin,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _create_user


@pytest.fixture
def auth_headers():
    """Build a bearer Authorization header for a user."""
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(subject=user.id)}"}

    return _headers


# ==================== HTTP Client Fixtures ====================

@pytest_asyncio.fixture
async def client(db_session, gateway, username_generator) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    HTTP client for the app with the database and collaborators overridden.

    Requests share ``db_session`` so tests can inspect rows directly.
    """
    async def _get_db() -> AsyncGenerator[AsyncSession, None]:
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_email_gateway] = lambda: gateway
    app.dependency_overrides[get_username_generator] = lambda: username_generator

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()
