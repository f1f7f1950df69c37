"""Store object handed to the password-reset flow.

Bundles the credential store and the reset ledger over a single
AsyncSession so both participate in the same transaction.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import StorageError
from app.repositories.reset_token_repository import ResetTokenRepository
from app.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class AuthStore:
    """Credential store + reset ledger sharing one transaction.

    Attributes:
        users: Credential store.
        reset_tokens: Reset ledger.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db
        self.users = UserRepository(db)
        self.reset_tokens = ResetTokenRepository(db)

    async def commit(self) -> None:
        """Commit everything written through this store.

        Raises:
            StorageError: If the commit fails.
        """
        try:
            await self._db.commit()
        except SQLAlchemyError as exc:
            logger.exception("Commit failed")
            raise StorageError() from exc

    async def rollback(self) -> None:
        """Discard uncommitted writes."""
        await self._db.rollback()
