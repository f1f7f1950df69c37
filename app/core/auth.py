"""Authentication helpers for session tokens and password hashing.

Shared utilities used by the auth endpoints and the reset flow.

Pipeline:
- issue_session_token: signed JWT for a successful login
- verify_session_token: fail-closed verification for protected routes
- hash_password / check_password: bcrypt wrappers
- DUMMY_HASH: Timing-safe constant for user enumeration defense

Session tokens are stateless. There is no revocation list: rotating
AUTH_SECRET is the only way to invalidate tokens before they expire.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt

from app.core.config import settings
from app.core.errors import UnauthorizedError
from app.models.user import User

logger = logging.getLogger(__name__)

_ALGORITHM = "HS256"

# bcrypt rejects (5.x) or silently truncates (4.x) longer inputs
BCRYPT_MAX_PASSWORD_BYTES = 72

# Pre-computed bcrypt hash for timing-safe comparison on user-not-found.
# Security: prevents user enumeration via response time differences.
# Pre-generated to avoid bcrypt computation on every app startup.
DUMMY_HASH = b"$2b$12$ZP2PVB8yI35X.mkRqcUPUuSzJA1CNRt4dZ7X3cyrfJu.2S3w.Qen2"


@dataclass(frozen=True)
class SessionClaims:
    """Verified contents of a session token.

    Attributes:
        user_id: Primary key of the authenticated user.
        username: Login name at issue time.
        role: Role claim (e.g. "admin").
        expires_at: Token expiry.
    """

    user_id: int
    username: str
    role: str
    expires_at: datetime


def _default_lifetime() -> timedelta:
    return timedelta(hours=settings.session_token_lifetime_hours)


def issue_session_token(
    user: User,
    *,
    secret: str,
    expires_delta: timedelta | None = None,
    now: datetime | None = None,
) -> str:
    """Create a signed session token for a user.

    Args:
        user: Authenticated user (id, username and role are encoded).
        secret: HMAC signing secret.
        expires_delta: Time until expiration. Defaults to
            SESSION_TOKEN_LIFETIME_HOURS.
        now: Issue time. Defaults to the current time.

    Returns:
        Encoded JWT string.
    """
    issued_at = now or datetime.now(UTC)
    payload = {
        "sub": str(user.id),
        "username": user.username,
        "role": user.role,
        "aud": settings.auth_audience,
        "iss": settings.auth_issuer,
        "exp": issued_at + (expires_delta or _default_lifetime()),
        "iat": issued_at,
    }
    return jwt.encode(payload, secret, algorithm=_ALGORITHM)


def verify_session_token(
    token: str,
    *,
    secret: str,
    now: datetime | None = None,
) -> SessionClaims:
    """Verify a session token and return its claims.

    Fails closed: a bad signature, malformed token, missing claim, wrong
    audience/issuer or an expiry at or before ``now`` all raise the same
    error, so callers cannot tell "expired" from "forged".

    Args:
        token: Encoded JWT from the Authorization header.
        secret: HMAC signing secret.
        now: Verification time. Defaults to the current time.

    Returns:
        SessionClaims for the token.

    Raises:
        UnauthorizedError: For any verification failure.
    """
    try:
        # exp is checked below against ``now`` so tests can pin the clock
        payload = jwt.decode(
            token,
            secret,
            algorithms=[_ALGORITHM],
            audience=settings.auth_audience,
            issuer=settings.auth_issuer,
            options={
                "require": ["sub", "exp", "iat"],
                "verify_exp": False,
            },
        )
        user_id = int(payload["sub"])
        username = str(payload["username"])
        role = str(payload["role"])
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=UTC)
    except (jwt.InvalidTokenError, KeyError, TypeError, ValueError) as exc:
        raise UnauthorizedError() from exc

    if expires_at <= (now or datetime.now(UTC)):
        raise UnauthorizedError()

    return SessionClaims(
        user_id=user_id,
        username=username,
        role=role,
        expires_at=expires_at,
    )


def hash_password(password: str, *, rounds: int) -> str:
    """Hash a password with bcrypt.

    Args:
        password: Plain-text password, at most BCRYPT_MAX_PASSWORD_BYTES
            once UTF-8 encoded.
        rounds: bcrypt cost factor.

    Returns:
        bcrypt hash as a str.

    Raises:
        ValueError: If the encoded password is too long for bcrypt.
    """
    encoded = password.encode()
    if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
        msg = f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes"
        raise ValueError(msg)
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode()


def check_password(password: str, password_hash: str | None) -> bool:
    """Compare a password against a stored bcrypt hash.

    When ``password_hash`` is None, or the password is longer than bcrypt
    accepts, the comparison still runs against DUMMY_HASH so the response
    time does not reveal whether the account exists.

    Args:
        password: Plain-text password.
        password_hash: Stored bcrypt hash, or None for an unknown user.

    Returns:
        True only when the hash exists and matches.
    """
    encoded = password.encode()
    if password_hash is None or len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
        # No stored hash is ever made from more than 72 bytes
        bcrypt.checkpw(encoded[:BCRYPT_MAX_PASSWORD_BYTES], DUMMY_HASH)
        return False
    try:
        return bcrypt.checkpw(encoded, password_hash.encode())
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False
