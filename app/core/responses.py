"""Response envelope models.

Every endpoint answers with a ``success`` flag so the admin frontend can
branch on a single field.

WHY RESPONSE ENVELOPES:
- Consistent structure across all endpoints
- Easy to distinguish success from error responses
- Type-safe response building in endpoints
"""

from typing import Literal

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Success envelope carrying a human-readable message.

    Usage:
        @router.post("/forgot-password")
        async def forgot_password(...) -> MessageResponse:
            return MessageResponse(message="OTP sent to your email address")
    """

    success: Literal[True] = True
    message: str


class SessionUser(BaseModel):
    """Public view of the authenticated admin.

    Attributes:
        id: User primary key.
        username: Login name.
        role: Role claim (e.g. "admin").
    """

    id: int
    username: str
    role: str


class LoginResponse(BaseModel):
    """Success envelope for POST /auth/login."""

    success: Literal[True] = True
    token: str
    user: SessionUser
    message: str = "Login successful"


class SessionResponse(BaseModel):
    """Success envelope for GET /auth/me."""

    success: Literal[True] = True
    user: SessionUser


class ErrorResponse(BaseModel):
    """Standard error response envelope.

    All errors use ``{"success": false, "error": ..., "code": ...}``.

    Attributes:
        error: Human-readable error message.
        code: Machine-readable error code (e.g., "INVALID_OR_EXPIRED_OTP").
        details: Optional list of field-level errors (for validation).

    Usage in exception handlers:
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=exc.message, code=exc.code).model_dump(
                exclude_none=True
            ),
        )
    """

    success: Literal[False] = False
    error: str
    code: str
    details: list[dict] | None = None
