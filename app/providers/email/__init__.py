"""Email provider module.

Exports:
    EmailProvider: Abstract base class for email delivery
    EmailMessage, EmailResult: Message and outcome dataclasses
    ResendEmailAdapter: Resend implementation
    MockEmailProvider: Recording provider for tests
"""

from app.providers.email.base import EmailMessage, EmailProvider, EmailResult
from app.providers.email.mock_adapter import MockEmailProvider
from app.providers.email.resend_adapter import ResendEmailAdapter

__all__ = [
    "EmailMessage",
    "EmailProvider",
    "EmailResult",
    "MockEmailProvider",
    "ResendEmailAdapter",
]
