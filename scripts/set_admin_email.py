"""Set the recovery email address of an admin account.

Standalone maintenance script. Forgot-password only works for accounts
with an email, so run this once after provisioning an admin without
ADMIN_EMAIL.

Usage:
    python -m scripts.set_admin_email <username> <email>

Exit codes:
    0: email updated
    1: no such user, or the address is already used by another account
"""

import argparse
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, StorageError
from app.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


async def set_admin_email(session: AsyncSession, username: str, email: str) -> None:
    """Attach ``email`` to the account named ``username``.

    Args:
        session: Active async database session. Not committed here.
        username: Login name of the account.
        email: New recovery address.

    Raises:
        NotFoundError: If no account has this username.
        StorageError: If the address belongs to another account.
    """
    users = UserRepository(session)
    user = await users.get_by_username(username)
    if user is None:
        raise NotFoundError("User", username)
    previous = user.email
    await users.set_email(user.id, email)
    logger.info("Updated email for %r: %r -> %r", username, previous, user.email)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("username", help="admin login name")
    parser.add_argument("email", help="new recovery email address")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    """CLI entry point: update the email against the configured database."""
    from app.core.config import settings
    from app.core.database import Database

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = _parse_args(argv)

    database = Database(settings.database_url)
    try:
        async with database.session() as session:
            await set_admin_email(session, args.username, args.email)
    except (NotFoundError, StorageError) as exc:
        logger.error("%s", exc.message)
        return 1
    finally:
        await database.dispose()

    return 0


if __name__ == "__main__":
    import asyncio
    import sys

    sys.exit(asyncio.run(main()))
