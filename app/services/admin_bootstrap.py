"""Default admin provisioning at startup.

Creates the configured admin account when no user with that username
exists. An existing account is left untouched, including its password.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import hash_password
from app.core.config import settings
from app.models.user import User
from app.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


async def ensure_default_admin(db: AsyncSession) -> User:
    """Create the default admin if its username is not taken.

    Uses ADMIN_USERNAME, ADMIN_PASSWORD (hashed with
    ADMIN_BOOTSTRAP_BCRYPT_ROUNDS) and ADMIN_EMAIL.

    Args:
        db: Async database session. Committed on creation.

    Returns:
        The existing or newly created admin user.
    """
    users = UserRepository(db)
    existing = await users.get_by_username(settings.admin_username)
    if existing is not None:
        return existing

    password_hash = hash_password(
        settings.admin_password.get_secret_value(),
        rounds=settings.admin_bootstrap_bcrypt_rounds,
    )
    try:
        user = await users.create(
            username=settings.admin_username,
            password_hash=password_hash,
            email=settings.admin_email or None,
            role="admin",
        )
        await db.commit()
    except IntegrityError:
        # Another worker created it first
        await db.rollback()
        concurrent = await users.get_by_username(settings.admin_username)
        if concurrent is None:
            raise
        return concurrent

    logger.info("Created default admin user %r", user.username)
    if not user.email:
        logger.warning(
            "Default admin has no email; password reset is unavailable until "
            "one is set (python -m scripts.set_admin_email)"
        )
    return user
