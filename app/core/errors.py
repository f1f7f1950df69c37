"""API error classes.

HTTP status codes and machine-readable error codes for the auth and
password-reset endpoints.

WHY CUSTOM ERROR CLASSES:
- Consistent error response format across all endpoints
- Easy to map to HTTP status codes in exception handlers
- Type-safe error handling in services/repositories
"""


class APIError(Exception):
    """Base class for API errors.

    All API errors have a code, message, and HTTP status.
    Subclasses set default status_code.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional list of additional error details.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ValidationError(APIError):
    """Field validation failed (400).

    Use for request body validation errors, query param errors, etc.
    """

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details=details,
        )


class UnauthorizedError(APIError):
    """Authentication required (401).

    Use when no valid session token is provided. The message never says
    whether the token was missing, forged or expired.
    """

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
        )


class InvalidCredentialsError(APIError):
    """Username/password pair rejected (401).

    Same message for unknown usernames and wrong passwords.
    """

    def __init__(self, message: str = "Invalid username or password") -> None:
        super().__init__(
            code="INVALID_CREDENTIALS",
            message=message,
            status_code=401,
        )


class NotFoundError(APIError):
    """Resource not found (404).

    Internal to repositories and scripts. The reset flow never lets this
    reach a client; it is translated to a generic credential error.
    """

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(
            code="NOT_FOUND",
            message=message,
            status_code=404,
        )


class AccountNotFoundError(APIError):
    """Forgot-password request for an unregistered email (400).

    Security: this reveals whether an account exists. Only raised while
    FORGOT_PASSWORD_REVEALS_UNKNOWN_EMAIL is enabled.
    """

    def __init__(self) -> None:
        super().__init__(
            code="ACCOUNT_NOT_FOUND",
            message="No account found with this email address",
            status_code=400,
        )


class InvalidOrExpiredOTPError(APIError):
    """Reset code rejected (400).

    Covers wrong code, expired code, already-used code and unknown email
    with a single message.
    """

    def __init__(self) -> None:
        super().__init__(
            code="INVALID_OR_EXPIRED_OTP",
            message="Invalid or expired OTP",
            status_code=400,
        )


class NotificationError(APIError):
    """Email dispatch failed (500)."""

    def __init__(
        self, message: str = "Failed to send email. Please try again later."
    ) -> None:
        super().__init__(
            code="NOTIFICATION_FAILED",
            message=message,
            status_code=500,
        )


class StorageError(APIError):
    """Persistence layer failure (500).

    The message is generic; the underlying database error is chained
    via ``raise ... from`` and only appears in server logs.
    """

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(
            code="STORAGE_ERROR",
            message=message,
            status_code=500,
        )


class InternalError(APIError):
    """Unexpected server error (500).

    Use for unhandled exceptions. Never expose stack traces to clients.
    """

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(
            code="INTERNAL_ERROR",
            message=message,
            status_code=500,
        )
