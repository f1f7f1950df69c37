"""Authentication endpoints for the admin panel.

POST /auth/login, /auth/forgot-password, /auth/reset-password,
/auth/verify and GET /auth/me.

Security considerations:
- login: constant-time comparison via DUMMY_HASH prevents user enumeration
- forgot-password / reset-password: rate limited, OTP single-use
- reset-password: one error for unknown email, wrong, expired or used code
"""

from fastapi import APIRouter, Request
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.api.deps import CurrentAdmin, ResetService, Store, get_bearer_token
from app.core.auth import (
    BCRYPT_MAX_PASSWORD_BYTES,
    check_password,
    issue_session_token,
)
from app.core.config import settings
from app.core.errors import InvalidCredentialsError, UnauthorizedError
from app.core.rate_limiting import limiter
from app.core.responses import (
    LoginResponse,
    MessageResponse,
    SessionResponse,
    SessionUser,
)

_RESET_REQUESTED_MSG = "If an account exists for this email, an OTP has been sent"
_PASSWORD_RESET_MSG = (
    "Password has been reset successfully. "
    "You can now log in with your new password."
)

router = APIRouter()


def _auth_rate_limit() -> str:
    return settings.rate_limit_auth


# ===================================================================
# Request models
# ===================================================================


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""

    model_config = ConfigDict(extra="forbid")

    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=128)

    @field_validator("username", mode="before")
    @classmethod
    def _strip_username(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class ForgotPasswordRequest(BaseModel):
    """Request body for POST /auth/forgot-password."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Request body for POST /auth/reset-password."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    email: EmailStr
    otp: str = Field(pattern=r"^[0-9]+$")
    new_password: str = Field(alias="newPassword", min_length=6, max_length=128)

    @field_validator("otp")
    @classmethod
    def _check_otp_length(cls, value: str) -> str:
        if len(value) != settings.otp_length:
            msg = f"OTP must be exactly {settings.otp_length} digits"
            raise ValueError(msg)
        return value

    @field_validator("new_password")
    @classmethod
    def _check_bcrypt_length(cls, value: str) -> str:
        if len(value.encode()) > BCRYPT_MAX_PASSWORD_BYTES:
            msg = f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes"
            raise ValueError(msg)
        return value


# ===================================================================
# POST /auth/login
# ===================================================================


@router.post("/login")
@limiter.limit(_auth_rate_limit)
async def login(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: LoginRequest,
    store: Store,
) -> LoginResponse:
    """Verify username + password and issue a bearer session token.

    Unauthenticated. Unknown usernames and wrong passwords get the same
    401 and take the same time.
    """
    user = await store.users.get_by_username(body.username)
    password_hash = user.password_hash if user else None
    if not check_password(body.password, password_hash) or user is None:
        raise InvalidCredentialsError()

    token = issue_session_token(user, secret=settings.auth_secret.get_secret_value())
    return LoginResponse(
        token=token,
        user=SessionUser(id=user.id, username=user.username, role=user.role),
    )


# ===================================================================
# POST /auth/forgot-password
# ===================================================================


@router.post("/forgot-password")
@limiter.limit(_auth_rate_limit)
async def forgot_password(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: ForgotPasswordRequest,
    service: ResetService,
) -> MessageResponse:
    """Email a one-time reset code to the account's recovery address.

    400 for an unregistered email while
    FORGOT_PASSWORD_REVEALS_UNKNOWN_EMAIL is on, 500 if the email cannot
    be delivered.
    """
    await service.request_reset(body.email)
    return MessageResponse(message=_RESET_REQUESTED_MSG)


# ===================================================================
# POST /auth/reset-password
# ===================================================================


@router.post("/reset-password")
@limiter.limit(_auth_rate_limit)
async def reset_password(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: ResetPasswordRequest,
    service: ResetService,
) -> MessageResponse:
    """Consume a reset code and set a new password."""
    await service.reset_password(body.email, body.otp, body.new_password)
    return MessageResponse(message=_PASSWORD_RESET_MSG)


# ===================================================================
# POST /auth/verify
# ===================================================================


@router.post("/verify")
async def verify(request: Request) -> MessageResponse:
    """Presence check for a bearer token.

    Only checks that a token was sent. Signature and expiry are enforced
    by get_current_admin on protected routes such as GET /auth/me.
    """
    if get_bearer_token(request) is None:
        raise UnauthorizedError("No token provided")
    return MessageResponse(message="Token is valid")


# ===================================================================
# GET /auth/me
# ===================================================================


@router.get("/me")
async def me(admin: CurrentAdmin) -> SessionResponse:
    """Return the identity carried by a verified session token."""
    return SessionResponse(
        user=SessionUser(id=admin.user_id, username=admin.username, role=admin.role)
    )
