"""One-time password generation for the password-reset flow.

Codes are fixed-length strings of decimal digits drawn from ``secrets``.
Leading zeros are significant, so a code is never converted to int.
Only the SHA-256 digest of a code is persisted.
"""

import hashlib
import secrets
import string
from datetime import datetime, timedelta

from app.core.config import settings

_DIGITS = string.digits


def hash_otp(otp: str) -> str:
    """Return the stored form of an OTP (SHA-256 hex digest).

    Args:
        otp: Plain code as emailed to the user.

    Returns:
        64-char lowercase hex digest.
    """
    return hashlib.sha256(otp.encode()).hexdigest()


class OTPIssuer:
    """Mints numeric codes and computes their validity window.

    Pure: no I/O and no stored state beyond configuration.

    Args:
        length: Number of digits per code.
        expires_in_minutes: Validity window from issue time.
    """

    def __init__(self, length: int = 6, expires_in_minutes: int = 10) -> None:
        if length < 1:
            msg = f"OTP length must be positive, got {length}"
            raise ValueError(msg)
        self.length = length
        self.expires_in = timedelta(minutes=expires_in_minutes)

    @classmethod
    def from_settings(cls) -> "OTPIssuer":
        """Build an issuer from OTP_LENGTH / OTP_EXPIRES_IN_MINUTES."""
        return cls(
            length=settings.otp_length,
            expires_in_minutes=settings.otp_expires_in_minutes,
        )

    def generate(self) -> str:
        """Generate a new code of ``length`` uniformly random digits."""
        return "".join(secrets.choice(_DIGITS) for _ in range(self.length))

    def expires_at(self, now: datetime) -> datetime:
        """Expiry timestamp for a code issued at ``now``."""
        return now + self.expires_in
