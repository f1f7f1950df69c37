"""Repository for User (credential store) operations.

Provides database access for the users table. Lookups return None when
the row is absent; writes raise NotFoundError or StorageError.
"""

import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, StorageError
from app.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Credential store bound to one AsyncSession.

    The caller owns the session and controls transaction boundaries;
    methods flush but never commit.

    Args:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get_by_id(self, user_id: int) -> User | None:
        """Fetch a user by primary key.

        Args:
            user_id: Integer primary key.

        Returns:
            User if found, None otherwise.
        """
        return await self._db.get(User, user_id)

    async def get_by_username(self, username: str) -> User | None:
        """Fetch a user by exact username.

        Args:
            username: Login name to look up.

        Returns:
            User if found, None otherwise.
        """
        stmt = select(User).where(User.username == username)
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email address (case-insensitive).

        Args:
            email: Email address to look up.

        Returns:
            User if found, None otherwise.
        """
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()

    async def create(
        self,
        *,
        username: str,
        password_hash: str,
        email: str | None = None,
        role: str = "admin",
    ) -> User:
        """Create a new user.

        Email is normalized to lowercase before storage.

        Args:
            username: Unique login name.
            password_hash: bcrypt hash of the initial password.
            email: Recovery email address.
            role: Role claim for session tokens.

        Returns:
            Created User with database-generated fields populated.

        Raises:
            sqlalchemy.exc.IntegrityError: If username or email already exists.
        """
        user = User(
            username=username,
            password_hash=password_hash,
            email=email.strip().lower() if email else None,
            role=role,
        )
        self._db.add(user)
        await self._db.flush()
        await self._db.refresh(user)
        return user

    async def update_password(self, user_id: int, password_hash: str) -> None:
        """Overwrite the stored password hash.

        updated_at is bumped by the TimestampMixin onupdate hook.

        Args:
            user_id: Primary key of the user.
            password_hash: New bcrypt hash.

        Raises:
            NotFoundError: If the user does not exist.
            StorageError: If the update fails in the database.
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(password_hash=password_hash)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._db.execute(stmt)
        except SQLAlchemyError as exc:
            logger.exception("Password update failed for user %s", user_id)
            raise StorageError() from exc
        if result.rowcount == 0:  # type: ignore[attr-defined]
            raise NotFoundError("User", str(user_id))

    async def set_email(self, user_id: int, email: str) -> User:
        """Set the recovery email address for a user.

        Args:
            user_id: Primary key of the user.
            email: New recovery address (stored lowercase).

        Returns:
            Updated User.

        Raises:
            NotFoundError: If the user does not exist.
            StorageError: If the address is already taken or the write fails.
        """
        user = await self._db.get(User, user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))
        user.email = email.strip().lower()
        try:
            await self._db.flush()
        except IntegrityError as exc:
            raise StorageError("Email address is already in use") from exc
        await self._db.refresh(user)
        return user
