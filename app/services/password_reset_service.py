"""Forgot-password / reset-password flow.

Per reset attempt: REQUESTED -> ISSUED -> (CONSUMED | EXPIRED | INVALID).

Request phase (forgot-password):
    1. Look up the user by email
    2. Mint an OTP, store its digest with an expiry, commit
    3. Email the OTP; delivery failure fails the request
       (the stored row stays and simply expires)

Confirmation phase (reset-password):
    1. Look up the user by email and an unused, unexpired matching row
    2. Hash the new password (before touching any row lock)
    3. Claim the row with a conditional UPDATE and write the new hash in
       the same transaction, then commit
    4. Email a confirmation; delivery failure is only logged

Unknown email, wrong code, expired code and reused code all produce the
same InvalidOrExpiredOTPError on confirmation. Earlier codes for the same
user stay valid when a new one is issued.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from app.core.auth import hash_password
from app.core.config import settings
from app.core.errors import (
    AccountNotFoundError,
    InvalidOrExpiredOTPError,
    NotFoundError,
    NotificationError,
)
from app.core.otp import OTPIssuer
from app.providers.email.base import EmailProvider
from app.repositories.auth_store import AuthStore
from app.services.reset_emails import (
    build_otp_email,
    build_reset_confirmation_email,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PasswordResetService:
    """Orchestrates OTP issue and consumption for admin password resets.

    Args:
        store: Credential store + reset ledger sharing one transaction.
        notifier: Email delivery capability.
        otp_issuer: Code generator and validity window.
        bcrypt_rounds: Cost factor for the new password hash.
        reveal_unknown_email: Answer forgot-password for an unregistered
            email with AccountNotFoundError instead of silent success.
        site_name: Brand name used in emails.
        clock: Returns the current time; injectable for tests.
    """

    def __init__(
        self,
        store: AuthStore,
        notifier: EmailProvider,
        otp_issuer: OTPIssuer,
        *,
        bcrypt_rounds: int = 12,
        reveal_unknown_email: bool = True,
        site_name: str = "S2 Design Interior",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._otp_issuer = otp_issuer
        self._bcrypt_rounds = bcrypt_rounds
        self._reveal_unknown_email = reveal_unknown_email
        self._site_name = site_name
        self._clock = clock

    @classmethod
    def from_settings(
        cls, store: AuthStore, notifier: EmailProvider
    ) -> "PasswordResetService":
        """Build a service configured from environment settings."""
        return cls(
            store,
            notifier,
            OTPIssuer.from_settings(),
            bcrypt_rounds=settings.bcrypt_rounds,
            reveal_unknown_email=settings.forgot_password_reveals_unknown_email,
            site_name=settings.site_name,
        )

    async def request_reset(self, email: str) -> bool:
        """Issue and email a reset code for the account owning ``email``.

        Args:
            email: Recovery email address from the request.

        Returns:
            True if a code was emailed, False if the email is unknown and
            unknown emails are not revealed.

        Raises:
            AccountNotFoundError: Unknown email while revealing is enabled.
            NotificationError: The OTP email could not be delivered.
            StorageError: The code could not be stored.
        """
        user = await self._store.users.get_by_email(email)
        if user is None or not user.email:
            logger.info("Password reset requested for unregistered email")
            if self._reveal_unknown_email:
                raise AccountNotFoundError()
            return False

        otp = self._otp_issuer.generate()
        expires_at = self._otp_issuer.expires_at(self._clock())
        await self._store.reset_tokens.issue(
            user_id=user.id, otp=otp, expires_at=expires_at
        )
        # Committed before the network call so no lock is held while sending
        await self._store.commit()

        message = build_otp_email(
            username=user.username,
            otp=otp,
            expires_in_minutes=int(self._otp_issuer.expires_in.total_seconds() // 60),
            site_name=self._site_name,
        )
        result = await self._notifier.send(user.email, message)
        if not result.success:
            logger.error(
                "Reset code email failed for user %s: %s", user.id, result.error
            )
            raise NotificationError("Failed to send OTP email. Please try again later.")

        logger.info("Reset code issued for user %s", user.id)
        return True

    async def reset_password(self, email: str, otp: str, new_password: str) -> None:
        """Consume a reset code and set a new password.

        Args:
            email: Recovery email address.
            otp: Code from the OTP email.
            new_password: Plain-text replacement password.

        Raises:
            InvalidOrExpiredOTPError: Unknown email, or no usable code
                matches (wrong, expired, already used, or lost a race).
            StorageError: The password could not be written.
        """
        user = await self._store.users.get_by_email(email)
        if user is None:
            raise InvalidOrExpiredOTPError()

        token = await self._store.reset_tokens.find_valid(
            user_id=user.id, otp=otp, now=self._clock()
        )
        if token is None:
            logger.info("Rejected reset code for user %s", user.id)
            raise InvalidOrExpiredOTPError()

        new_hash = hash_password(new_password, rounds=self._bcrypt_rounds)

        try:
            if not await self._store.reset_tokens.mark_used(token.id):
                raise InvalidOrExpiredOTPError()
            await self._store.users.update_password(user.id, new_hash)
            await self._store.commit()
        except NotFoundError as exc:
            await self._store.rollback()
            raise InvalidOrExpiredOTPError() from exc
        except Exception:
            await self._store.rollback()
            raise

        logger.info("Password reset completed for user %s", user.id)

        if not user.email:
            return
        try:
            result = await self._notifier.send(
                user.email,
                build_reset_confirmation_email(
                    username=user.username, site_name=self._site_name
                ),
            )
        except Exception:
            logger.exception("Reset confirmation email raised for user %s", user.id)
            return
        if not result.success:
            logger.warning(
                "Reset confirmation email failed for user %s: %s",
                user.id,
                result.error,
            )
