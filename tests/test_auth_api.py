"""
Authentication API Tests

End-to-end tests for registration, login, one-time codes, password reset
and username endpoints.
"""

from unittest.mock import MagicMock, patch

import pytest

from app.api.deps import get_email_gateway
from app.core.exceptions import SuggestionServiceError
from app.core.security import verify_password
from app.main import app
from app.services import otp_service
from app.services.email_service import SMTPEmailGateway


PASSWORD = "Secret12!"


async def register(client, email="carol@devkit.dev", username="carol", password=PASSWORD):
    return await client.post(
        "/api/v1/auth/register",
        json={"email": email, "username": username, "password": password},
    )


# ==================== Registration ====================

class TestRegister:
    """Tests for POST /auth/register."""

    @pytest.mark.asyncio
    async def test_creates_unverified_user_and_sends_code(self, client, db_session, gateway, clock):
        response = await register(client)

        assert response.status_code == 201
        assert "verify your email" in response.json()["message"]

        user = await otp_service.get_user_by_email(db_session, "carol@devkit.dev")
        assert user.username == "carol"
        assert user.is_email_verified is False
        assert user.otp_code == gateway.last_code("carol@devkit.dev")
        assert gateway.sent[-1].subject == "DevKit - Verify Your Account"

    @pytest.mark.asyncio
    async def test_verified_email_conflict(self, client, make_user):
        await make_user(email="carol@devkit.dev", username="carol")

        response = await register(client, username="carol2")

        assert response.status_code == 409
        assert response.json() == {"error": "User with this email already exists"}

    @pytest.mark.asyncio
    async def test_username_conflict(self, client, make_user):
        await make_user(email="other@devkit.dev", username="carol")

        response = await register(client)

        assert response.status_code == 409
        assert response.json()["error"] == "Username is already taken"

    @pytest.mark.asyncio
    async def test_unverified_registration_is_refreshed(self, client, db_session, make_user, gateway, clock):
        """Verify re-registering an unverified email updates it and sends a new code."""
        await make_user(email="carol@devkit.dev", username="carol", verified=False)

        response = await register(client, username="carolnew", password="Another9#")

        assert response.status_code == 201
        user = await otp_service.get_user_by_email(db_session, "carol@devkit.dev")
        assert user.username == "carolnew"
        assert verify_password("Another9#", user.password_hash)
        assert len(gateway.sent) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "password, message",
        [
            ("Sh0rt!", "Password must be at least 8 characters!"),
            ("Password123", "Password needs at least one special character (!@#$%&*)"),
            ("password!!", "Password needs at least one number"),
            ("12345678!", "Password needs at least one letter"),
            ("Abcdefgh12345678901!", None),
        ],
    )
    async def test_password_rules(self, client, clock, password, message):
        response = await register(client, password=password)

        if message is None:
            assert response.status_code == 201
        else:
            assert response.status_code == 400
            assert response.json() == {"error": message}

    @pytest.mark.asyncio
    async def test_invalid_username(self, client):
        response = await register(client, username="bad_name")

        assert response.status_code == 400
        assert "Username must be 3-20 characters" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_username_is_lowercased(self, client, db_session, clock):
        response = await register(client, username="CarolDev")

        assert response.status_code == 201
        user = await otp_service.get_user_by_email(db_session, "carol@devkit.dev")
        assert user.username == "caroldev"


# ==================== Verification ====================

class TestVerifyEmail:
    """Tests for PATCH /auth/verify-email."""

    @pytest.mark.asyncio
    async def test_register_verify_login(self, client, gateway, clock):
        """Verify the full happy path from registration to access token."""
        await register(client)
        code = gateway.last_code()

        response = await client.patch(
            "/api/v1/auth/verify-email",
            json={"email": "carol@devkit.dev", "otp": code},
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Email verified successfully"}

        response = await client.post(
            "/api/v1/auth/login",
            data={"username": "carol@devkit.dev", "password": PASSWORD},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"

        me = await client.get(
            "/api/v1/users/me",
            headers={"Authorization": f"Bearer {body['access_token']}"},
        )
        assert me.status_code == 200
        assert me.json()["username"] == "carol"
        assert me.json()["is_email_verified"] is True

    @pytest.mark.asyncio
    async def test_mismatch(self, client, db_session, gateway, clock):
        await register(client)
        code = gateway.last_code()
        wrong = "000000" if code != "000000" else "111111"

        response = await client.patch(
            "/api/v1/auth/verify-email",
            json={"email": "carol@devkit.dev", "otp": wrong},
        )

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid verification code", "reason": "Mismatch"}

        user = await otp_service.get_user_by_email(db_session, "carol@devkit.dev")
        assert user.failed_otp_attempts == 1
        assert user.otp_code == code

    @pytest.mark.asyncio
    async def test_expired(self, client, gateway, clock):
        await register(client)
        code = gateway.last_code()
        clock.advance(minutes=15, seconds=1)

        response = await client.patch(
            "/api/v1/auth/verify-email",
            json={"email": "carol@devkit.dev", "otp": code},
        )

        assert response.status_code == 410
        assert response.json()["reason"] == "Expired"

    @pytest.mark.asyncio
    async def test_unknown_email(self, client):
        response = await client.patch(
            "/api/v1/auth/verify-email",
            json={"email": "ghost@devkit.dev", "otp": "123456"},
        )

        assert response.status_code == 404
        assert response.json() == {"error": "User not found", "reason": "NotFound"}

    @pytest.mark.asyncio
    async def test_second_use_has_no_challenge(self, client, gateway, clock):
        await register(client)
        payload = {"email": "carol@devkit.dev", "otp": gateway.last_code()}

        assert (await client.patch("/api/v1/auth/verify-email", json=payload)).status_code == 200
        response = await client.patch("/api/v1/auth/verify-email", json=payload)

        assert response.status_code == 400
        assert response.json()["reason"] == "NoChallenge"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("otp", ["12345", "1234567", "12a456", ""])
    async def test_malformed_code_rejected_before_lookup(self, client, otp):
        response = await client.patch(
            "/api/v1/auth/verify-email",
            json={"email": "carol@devkit.dev", "otp": otp},
        )

        assert response.status_code == 400
        assert "reason" not in response.json()


# ==================== Code Issuance ====================

class TestRequestOTP:
    """Tests for POST /auth/otp."""

    @pytest.mark.asyncio
    async def test_resend_respects_cooldown(self, client, gateway, clock):
        await register(client)
        payload = {"email": "carol@devkit.dev", "flow": "verify-email"}

        response = await client.post("/api/v1/auth/otp", json=payload)
        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"
        assert "60 seconds" in response.json()["error"]

        clock.advance(seconds=61)
        response = await client.post("/api/v1/auth/otp", json=payload)
        assert response.status_code == 200
        assert response.json() == {"message": "Verification code sent to your email"}
        assert len(gateway.sent) == 2

    @pytest.mark.asyncio
    async def test_resend_replaces_code(self, client, gateway, clock):
        await register(client)
        first = gateway.last_code()
        clock.advance(seconds=61)
        await client.post("/api/v1/auth/otp", json={"email": "carol@devkit.dev", "flow": "verify-email"})
        second = gateway.last_code()

        if first != second:
            stale = await client.patch(
                "/api/v1/auth/verify-email",
                json={"email": "carol@devkit.dev", "otp": first},
            )
            assert stale.status_code == 401

        fresh = await client.patch(
            "/api/v1/auth/verify-email",
            json={"email": "carol@devkit.dev", "otp": second},
        )
        assert fresh.status_code == 200

    @pytest.mark.asyncio
    async def test_verify_flow_unknown_email(self, client):
        response = await client.post(
            "/api/v1/auth/otp",
            json={"email": "ghost@devkit.dev", "flow": "verify-email"},
        )

        assert response.status_code == 404
        assert response.json()["reason"] == "NotFound"

    @pytest.mark.asyncio
    async def test_verify_flow_already_verified(self, client, make_user):
        await make_user(email="carol@devkit.dev", username="carol")

        response = await client.post(
            "/api/v1/auth/otp",
            json={"email": "carol@devkit.dev", "flow": "verify-email"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Email already verified"}

    @pytest.mark.asyncio
    async def test_reset_flow_does_not_reveal_unknown_email(self, client, gateway):
        response = await client.post(
            "/api/v1/auth/otp",
            json={"email": "ghost@devkit.dev", "flow": "reset-password"},
        )

        assert response.status_code == 200
        assert "If an account exists" in response.json()["message"]
        assert gateway.sent == []

    @pytest.mark.asyncio
    async def test_unknown_flow_rejected(self, client):
        response = await client.post(
            "/api/v1/auth/otp",
            json={"email": "carol@devkit.dev", "flow": "magic-link"},
        )

        assert response.status_code == 400


# ==================== Login ====================

class TestLogin:
    """Tests for POST /auth/login."""

    @pytest.mark.asyncio
    async def test_wrong_password(self, client, make_user):
        await make_user(email="carol@devkit.dev", username="carol")

        response = await client.post(
            "/api/v1/auth/login",
            data={"username": "carol@devkit.dev", "password": "Wrong123!"},
        )

        assert response.status_code == 401
        assert response.json() == {"error": "Incorrect email or password"}

    @pytest.mark.asyncio
    async def test_unverified_gets_new_code(self, client, db_session, make_user, gateway, clock):
        await make_user(email="carol@devkit.dev", username="carol", verified=False)

        response = await client.post(
            "/api/v1/auth/login",
            data={"username": "carol@devkit.dev", "password": PASSWORD},
        )

        assert response.status_code == 403
        assert len(gateway.sent) == 1
        user = await otp_service.get_user_by_email(db_session, "carol@devkit.dev")
        assert user.otp_code == gateway.last_code()

    @pytest.mark.asyncio
    async def test_undeliverable_address_still_gets_403(self, client, db_session, make_user, clock):
        """Verify an SMTP encoding failure during inline delivery does not break login."""
        await make_user(email="jösé@example.com", username="jose", verified=False)
        smtp_gateway = SMTPEmailGateway("smtp.devkit.dev", 587, "user", "pass", "noreply@devkit.dev")
        app.dependency_overrides[get_email_gateway] = lambda: smtp_gateway

        with patch("app.services.email_service.smtplib.SMTP") as mock_smtp:
            server = MagicMock()
            server.sendmail.side_effect = UnicodeEncodeError("ascii", "jösé", 1, 2, "ordinal not in range(128)")
            mock_smtp.return_value.__enter__.return_value = server

            response = await client.post(
                "/api/v1/auth/login",
                data={"username": "jösé@example.com", "password": PASSWORD},
            )

        assert response.status_code == 403
        user = await otp_service.get_user_by_email(db_session, "jösé@example.com")
        assert user.otp_code is not None

    @pytest.mark.asyncio
    async def test_records_last_login(self, client, db_session, make_user):
        await make_user(email="carol@devkit.dev", username="carol")

        response = await client.post(
            "/api/v1/auth/login",
            data={"username": "Carol@devkit.dev", "password": PASSWORD},
        )

        assert response.status_code == 200
        user = await otp_service.get_user_by_email(db_session, "carol@devkit.dev")
        assert user.last_login_at is not None


# ==================== Password Reset ====================

class TestPasswordReset:
    """Tests for PATCH /auth/reset-password-email and PUT /auth/reset-password."""

    @pytest.mark.asyncio
    async def test_full_reset(self, client, make_user, gateway, clock):
        await make_user(email="carol@devkit.dev", username="carol")

        response = await client.patch(
            "/api/v1/auth/reset-password-email",
            json={"email": "carol@devkit.dev"},
        )
        assert response.status_code == 200
        assert gateway.sent[-1].subject == "DevKit - OTP for Password Reset"

        response = await client.put(
            "/api/v1/auth/reset-password",
            json={
                "email": "carol@devkit.dev",
                "otp": gateway.last_code(),
                "new_password": "Brand9new!",
            },
        )
        assert response.status_code == 200

        old = await client.post(
            "/api/v1/auth/login",
            data={"username": "carol@devkit.dev", "password": PASSWORD},
        )
        assert old.status_code == 401

        new = await client.post(
            "/api/v1/auth/login",
            data={"username": "carol@devkit.dev", "password": "Brand9new!"},
        )
        assert new.status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_code_keeps_password(self, client, db_session, make_user, gateway, clock):
        await make_user(email="carol@devkit.dev", username="carol")
        await client.patch("/api/v1/auth/reset-password-email", json={"email": "carol@devkit.dev"})
        code = gateway.last_code()
        wrong = "000000" if code != "000000" else "111111"

        response = await client.put(
            "/api/v1/auth/reset-password",
            json={"email": "carol@devkit.dev", "otp": wrong, "new_password": "Brand9new!"},
        )

        assert response.status_code == 401
        assert response.json()["reason"] == "Mismatch"
        user = await otp_service.get_user_by_email(db_session, "carol@devkit.dev")
        assert verify_password(PASSWORD, user.password_hash)

    @pytest.mark.asyncio
    async def test_weak_new_password(self, client):
        response = await client.put(
            "/api/v1/auth/reset-password",
            json={"email": "carol@devkit.dev", "otp": "123456", "new_password": "weak"},
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_email_gets_generic_message(self, client, gateway):
        response = await client.patch(
            "/api/v1/auth/reset-password-email",
            json={"email": "ghost@devkit.dev"},
        )

        assert response.status_code == 200
        assert gateway.sent == []


# ==================== Usernames ====================

class TestUsernames:
    """Tests for GET /auth/check-username and GET /auth/suggest-username."""

    @pytest.mark.asyncio
    async def test_available(self, client):
        response = await client.get("/api/v1/auth/check-username", params={"username": "newbie"})

        assert response.status_code == 200
        assert response.json() == {"available": True, "message": "Username is available"}

    @pytest.mark.asyncio
    async def test_taken(self, client, make_user):
        await make_user(username="carol")

        response = await client.get("/api/v1/auth/check-username", params={"username": "carol"})

        assert response.status_code == 409
        assert response.json() == {"error": "Username is already taken"}

    @pytest.mark.asyncio
    async def test_invalid_format(self, client):
        response = await client.get("/api/v1/auth/check-username", params={"username": "no"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_suggestions(self, client, make_user, username_generator):
        await make_user(username="zoro")

        response = await client.get("/api/v1/auth/suggest-username")

        assert response.status_code == 200
        assert response.json() == {
            "message": "Usernames generated successfully",
            "usernames": ["codeluffy", "quantum42"],
        }

    @pytest.mark.asyncio
    async def test_suggestion_failure(self, client, username_generator):
        username_generator.response = SuggestionServiceError()

        response = await client.get("/api/v1/auth/suggest-username")

        assert response.status_code == 502
        assert response.json() == {"error": "Generating usernames failed!"}


# ==================== Profile ====================

class TestProfile:
    """Tests for GET/PATCH /users/me."""

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.get("/api/v1/users/me")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        response = await client.get("/api/v1/users/me", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert response.json() == {"error": "Could not validate credentials"}

    @pytest.mark.asyncio
    async def test_update_profile(self, client, make_user, auth_headers):
        user = await make_user(email="carol@devkit.dev", username="carol")
        headers = auth_headers(user)

        response = await client.patch(
            "/api/v1/users/me",
            json={"bio": "Shipping scaffolds", "github_username": "carol-dev"},
            headers=headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["bio"] == "Shipping scaffolds"
        assert body["github_username"] == "carol-dev"
        assert body["username"] == "carol"
        assert "password_hash" not in body
        assert "otp_code" not in body
