"""Tests for the auth endpoints.

POST /api/auth/login, /forgot-password, /reset-password, /verify and
GET /api/auth/me, run against the in-memory store and mock email.
"""

import re
from datetime import UTC, datetime, timedelta

import pytest

from app.core.auth import issue_session_token
from app.models import User
from tests.conftest import TEST_AUTH_SECRET, TEST_EMAIL, TEST_PASSWORD

_LOGIN = "/api/auth/login"
_FORGOT = "/api/auth/forgot-password"
_RESET = "/api/auth/reset-password"
_VERIFY = "/api/auth/verify"
_ME = "/api/auth/me"
_NEW_PASSWORD = "fresh-password-42"  # nosec B105


def _emailed_code(mock_email) -> str:
    match = re.search(r"^\s+(\d+)$", mock_email.last_message.text, re.MULTILINE)
    assert match is not None
    return match.group(1)


def _token_for(user_id: int = 1, **kwargs) -> str:
    user = User(id=user_id, username="admin", password_hash="x", role="admin")
    return issue_session_token(user, secret=TEST_AUTH_SECRET, **kwargs)


class TestLogin:
    """POST /api/auth/login."""

    async def test_success_returns_token_and_user(self, client):
        response = await client.post(
            _LOGIN, json={"username": "admin", "password": TEST_PASSWORD}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Login successful"
        assert body["user"] == {"id": 1, "username": "admin", "role": "admin"}
        assert body["token"]

    async def test_token_works_on_me(self, client):
        login = await client.post(
            _LOGIN, json={"username": "admin", "password": TEST_PASSWORD}
        )
        token = login.json()["token"]

        response = await client.get(_ME, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["user"]["username"] == "admin"

    @pytest.mark.parametrize(
        "credentials",
        [
            {"username": "admin", "password": "wrong-password"},
            {"username": "ghost", "password": TEST_PASSWORD},
        ],
    )
    async def test_bad_credentials_are_indistinguishable(self, client, credentials):
        response = await client.post(_LOGIN, json=credentials)

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": "Invalid username or password",
            "code": "INVALID_CREDENTIALS",
        }

    async def test_missing_fields_is_validation_error(self, client):
        response = await client.post(_LOGIN, json={"username": "admin"})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"]

    async def test_blank_username_rejected(self, client):
        response = await client.post(
            _LOGIN, json={"username": "   ", "password": TEST_PASSWORD}
        )
        assert response.status_code == 400


class TestForgotPassword:
    """POST /api/auth/forgot-password."""

    async def test_sends_code(self, client, mock_email, memory_store):
        response = await client.post(_FORGOT, json={"email": TEST_EMAIL})

        assert response.status_code == 200
        assert response.json()["success"] is True
        mock_email.assert_sent_to(TEST_EMAIL)
        assert len(memory_store.reset_tokens.tokens) == 1

    async def test_unknown_email_revealed(self, client, mock_email, memory_store):
        response = await client.post(_FORGOT, json={"email": "nouser@example.com"})

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "No account found with this email address",
            "code": "ACCOUNT_NOT_FOUND",
        }
        assert mock_email.calls == []
        assert memory_store.reset_tokens.tokens == {}

    async def test_unknown_email_hidden_when_configured(
        self, client, mock_email, monkeypatch
    ):
        from app.core.config import settings

        monkeypatch.setattr(settings, "forgot_password_reveals_unknown_email", False)

        response = await client.post(_FORGOT, json={"email": "nouser@example.com"})

        assert response.status_code == 200
        assert mock_email.calls == []

    async def test_delivery_failure_is_500(self, client, mock_email, memory_store):
        mock_email.fail = True

        response = await client.post(_FORGOT, json={"email": TEST_EMAIL})

        assert response.status_code == 500
        assert response.json()["code"] == "NOTIFICATION_FAILED"
        assert len(memory_store.reset_tokens.tokens) == 1

    async def test_invalid_email_rejected(self, client, mock_email):
        response = await client.post(_FORGOT, json={"email": "not-an-email"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert mock_email.calls == []


class TestResetPassword:
    """POST /api/auth/reset-password."""

    async def test_full_flow_then_login(self, client, mock_email):
        await client.post(_FORGOT, json={"email": TEST_EMAIL})
        code = _emailed_code(mock_email)

        response = await client.post(
            _RESET,
            json={"email": TEST_EMAIL, "otp": code, "newPassword": _NEW_PASSWORD},
        )

        assert response.status_code == 200
        assert response.json()["success"] is True
        old = await client.post(
            _LOGIN, json={"username": "admin", "password": TEST_PASSWORD}
        )
        new = await client.post(
            _LOGIN, json={"username": "admin", "password": _NEW_PASSWORD}
        )
        assert old.status_code == 401
        assert new.status_code == 200

    async def test_reused_code_rejected(self, client, mock_email):
        await client.post(_FORGOT, json={"email": TEST_EMAIL})
        payload = {
            "email": TEST_EMAIL,
            "otp": _emailed_code(mock_email),
            "newPassword": _NEW_PASSWORD,
        }

        first = await client.post(_RESET, json=payload)
        second = await client.post(_RESET, json=payload)

        assert first.status_code == 200
        assert second.status_code == 400
        assert second.json() == {
            "success": False,
            "error": "Invalid or expired OTP",
            "code": "INVALID_OR_EXPIRED_OTP",
        }

    async def test_unknown_email_same_error(self, client):
        response = await client.post(
            _RESET,
            json={
                "email": "nouser@example.com",
                "otp": "123456",
                "newPassword": _NEW_PASSWORD,
            },
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_OR_EXPIRED_OTP"

    @pytest.mark.parametrize(
        "payload",
        [
            {"email": TEST_EMAIL, "otp": "12345", "newPassword": _NEW_PASSWORD},
            {"email": TEST_EMAIL, "otp": "12a456", "newPassword": _NEW_PASSWORD},
            {"email": TEST_EMAIL, "otp": "123456", "newPassword": "short"},
            {"email": TEST_EMAIL, "otp": "123456"},
            {"email": "bad", "otp": "123456", "newPassword": _NEW_PASSWORD},
        ],
    )
    async def test_validation(self, client, payload):
        response = await client.post(_RESET, json=payload)

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestVerify:
    """POST /api/auth/verify."""

    async def test_token_present(self, client):
        response = await client.post(
            _VERIFY, headers={"Authorization": f"Bearer {_token_for()}"}
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Token is valid"}

    async def test_no_token(self, client):
        response = await client.post(_VERIFY)

        assert response.status_code == 401
        assert response.json()["error"] == "No token provided"


class TestMe:
    """GET /api/auth/me."""

    async def test_valid_token(self, client):
        response = await client.get(
            _ME, headers={"Authorization": f"Bearer {_token_for()}"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "user": {"id": 1, "username": "admin", "role": "admin"},
        }

    async def test_missing_token(self, client):
        response = await client.get(_ME)

        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    async def test_expired_token(self, client):
        token = _token_for(
            expires_delta=timedelta(hours=1),
            now=datetime.now(UTC) - timedelta(hours=2),
        )

        response = await client.get(_ME, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    async def test_tampered_token(self, client):
        token = _token_for()
        tampered = token[:-4] + ("AAAA" if token[-4:] != "AAAA" else "BBBB")

        response = await client.get(
            _ME, headers={"Authorization": f"Bearer {tampered}"}
        )

        assert response.status_code == 401

    async def test_non_bearer_scheme(self, client):
        response = await client.get(
            _ME, headers={"Authorization": f"Basic {_token_for()}"}
        )

        assert response.status_code == 401


class TestLongPasswords:
    """Passwords beyond bcrypt's 72-byte input limit."""

    @pytest.mark.parametrize("username", ["admin", "nobody"])
    async def test_login_rejects_long_password_uniformly(self, client, username):
        response = await client.post(
            _LOGIN, json={"username": username, "password": "p" * 100}
        )

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": "Invalid username or password",
            "code": "INVALID_CREDENTIALS",
        }

    @pytest.mark.parametrize(
        "new_password",
        [
            "p" * 100,
            "é" * 40,  # 40 characters, 80 bytes
        ],
    )
    async def test_reset_rejects_password_over_72_bytes(
        self, client, mock_email, memory_store, new_password
    ):
        await client.post(_FORGOT, json={"email": TEST_EMAIL})
        code = _emailed_code(mock_email)

        response = await client.post(
            _RESET,
            json={"email": TEST_EMAIL, "otp": code, "newPassword": new_password},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        [token] = memory_store.reset_tokens.tokens.values()
        assert token.used is False

    async def test_reset_accepts_exactly_72_bytes(self, client, mock_email):
        await client.post(_FORGOT, json={"email": TEST_EMAIL})
        code = _emailed_code(mock_email)

        response = await client.post(
            _RESET,
            json={"email": TEST_EMAIL, "otp": code, "newPassword": "p" * 72},
        )

        assert response.status_code == 200
        login = await client.post(
            _LOGIN, json={"username": "admin", "password": "p" * 72}
        )
        assert login.status_code == 200
