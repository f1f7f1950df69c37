"""SQLAlchemy ORM models.

All models are exported from this module for convenient imports:
    from app.models import User, PasswordResetToken

Models:
- user.py: User (admin credentials)
- password_reset_token.py: PasswordResetToken (OTP ledger, FK to users)
"""

from app.models.base import Base, TimestampMixin
from app.models.password_reset_token import PasswordResetToken
from app.models.user import User

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    # Tables
    "User",
    "PasswordResetToken",
]
