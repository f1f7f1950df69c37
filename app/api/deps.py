"""Shared dependencies for API endpoints.

Database session, reset-flow wiring and bearer-token authentication.

WHY DEPENDENCY INJECTION:
- Consistent auth across all protected endpoints
- Tests swap the database and email provider via dependency_overrides
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import SessionClaims, verify_session_token
from app.core.config import settings
from app.core.database import get_db
from app.core.errors import UnauthorizedError
from app.providers.email.base import EmailProvider
from app.providers.factory import get_email_provider
from app.repositories.auth_store import AuthStore
from app.services.password_reset_service import PasswordResetService

# Security: Never include specifics about WHY auth failed (expired, bad sig, etc.).
_UNAUTHORIZED_MESSAGE = "Invalid or missing authentication token"


def get_bearer_token(request: Request) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    Returns:
        The token, or None when the header is absent or not a bearer header.
    """
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_admin(request: Request) -> SessionClaims:
    """Verify the bearer session token on a protected route.

    Stateless: claims come from the token alone, no database lookup.

    Args:
        request: HTTP request (injected by FastAPI).

    Returns:
        Verified SessionClaims.

    Raises:
        UnauthorizedError: 401 for any auth failure.
    """
    token = get_bearer_token(request)
    if token is None:
        raise UnauthorizedError(_UNAUTHORIZED_MESSAGE)
    try:
        return verify_session_token(
            token, secret=settings.auth_secret.get_secret_value()
        )
    except UnauthorizedError as exc:
        raise UnauthorizedError(_UNAUTHORIZED_MESSAGE) from exc


# Reusable type aliases for dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentAdmin = Annotated[SessionClaims, Depends(get_current_admin)]
Notifier = Annotated[EmailProvider, Depends(get_email_provider)]


def get_auth_store(db: DbSession) -> AuthStore:
    """Build the request-scoped credential store + reset ledger."""
    return AuthStore(db)


Store = Annotated[AuthStore, Depends(get_auth_store)]


def get_password_reset_service(
    store: Store,
    notifier: Notifier,
) -> PasswordResetService:
    """Build the reset flow controller for this request."""
    return PasswordResetService.from_settings(store, notifier)


ResetService = Annotated[PasswordResetService, Depends(get_password_reset_service)]
