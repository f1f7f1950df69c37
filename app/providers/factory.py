"""Provider factory functions.

Singleton pattern for provider instances.
"""

from app.core.config import settings
from app.providers.email.base import EmailProvider
from app.providers.email.mock_adapter import MockEmailProvider
from app.providers.email.resend_adapter import ResendEmailAdapter

_email_provider: EmailProvider | None = None


def get_email_provider() -> EmailProvider:
    """Get or create the email provider singleton.

    WHY SINGLETON:
    - One configured sender for the whole app
    - Tests inject a MockEmailProvider by assigning ``_email_provider``

    Returns:
        EmailProvider instance selected by EMAIL_PROVIDER.

    Raises:
        ValueError: If the configured provider is unknown.
    """
    global _email_provider

    if _email_provider is None:
        if settings.email_provider == "resend":
            _email_provider = ResendEmailAdapter(
                api_key=settings.resend_api_key.get_secret_value(),
                sender=settings.email_from,
                api_url=settings.resend_api_url,
            )
        elif settings.email_provider == "mock":
            _email_provider = MockEmailProvider()
        else:
            raise ValueError(f"Unknown email provider: {settings.email_provider}")

    return _email_provider


def reset_providers() -> None:
    """Reset provider singletons.

    Used in tests to ensure isolation between test cases.
    """
    global _email_provider
    _email_provider = None
