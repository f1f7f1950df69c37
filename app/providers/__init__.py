"""Provider abstraction layer.

Exports:
    EmailProvider and its result types
    Factory functions for provider instances
"""

from app.providers.email import EmailMessage, EmailProvider, EmailResult
from app.providers.factory import get_email_provider, reset_providers

__all__ = [
    "EmailMessage",
    "EmailProvider",
    "EmailResult",
    "get_email_provider",
    "reset_providers",
]
