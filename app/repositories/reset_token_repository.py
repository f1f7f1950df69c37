"""Repository for PasswordResetToken (reset ledger) operations.

Codes are stored as SHA-256 digests. A row is valid while ``used`` is
false and ``expires_at`` is strictly in the future. Issuing a new code
does not touch the user's earlier rows.
"""

import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, StorageError
from app.core.otp import hash_otp
from app.models.password_reset_token import PasswordResetToken

logger = logging.getLogger(__name__)


class ResetTokenRepository:
    """Reset ledger bound to one AsyncSession.

    Args:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def issue(
        self,
        *,
        user_id: int,
        otp: str,
        expires_at: datetime,
    ) -> PasswordResetToken:
        """Store a newly issued code.

        Args:
            user_id: Owner of the code.
            otp: Plain code (hashed before storage).
            expires_at: Absolute expiry timestamp.

        Returns:
            Created PasswordResetToken.

        Raises:
            StorageError: If the insert fails.
        """
        token = PasswordResetToken(
            user_id=user_id,
            otp_hash=hash_otp(otp),
            expires_at=expires_at,
            used=False,
        )
        self._db.add(token)
        try:
            await self._db.flush()
        except SQLAlchemyError as exc:
            logger.exception("Failed to store reset token for user %s", user_id)
            raise StorageError() from exc
        return token

    async def find_valid(
        self,
        *,
        user_id: int,
        otp: str,
        now: datetime,
    ) -> PasswordResetToken | None:
        """Look up an unused, unexpired code for a user.

        Distinct codes are not enforced, so more than one row can match;
        the most recently issued one is returned.

        Args:
            user_id: Owner of the code.
            otp: Plain code from the request.
            now: Reference time for the expiry check.

        Returns:
            PasswordResetToken if a usable row exists, None otherwise.
        """
        stmt = (
            select(PasswordResetToken)
            .where(
                PasswordResetToken.user_id == user_id,
                PasswordResetToken.otp_hash == hash_otp(otp),
                PasswordResetToken.used.is_(False),
                PasswordResetToken.expires_at > now,
            )
            .order_by(PasswordResetToken.id.desc())
            .limit(1)
        )
        result = await self._db.execute(stmt)
        return result.scalars().first()

    async def mark_used(self, token_id: int) -> bool:
        """Flip ``used`` from false to true (compare-and-swap).

        The UPDATE only matches an unused row, so among concurrent callers
        at most one sees an affected row. Calling again on a used row is a
        no-op that returns False.

        Args:
            token_id: Primary key of the token.

        Returns:
            True if this call consumed the token, False if it was already used.

        Raises:
            NotFoundError: If no token has this id.
            StorageError: If the update fails.
        """
        stmt = (
            update(PasswordResetToken)
            .where(
                PasswordResetToken.id == token_id,
                PasswordResetToken.used.is_(False),
            )
            .values(used=True)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._db.execute(stmt)
        except SQLAlchemyError as exc:
            logger.exception("Failed to consume reset token %s", token_id)
            raise StorageError() from exc

        if result.rowcount == 1:  # type: ignore[attr-defined]
            return True

        exists = await self._db.scalar(
            select(PasswordResetToken.id).where(PasswordResetToken.id == token_id)
        )
        if exists is None:
            raise NotFoundError("Reset token", str(token_id))
        return False
