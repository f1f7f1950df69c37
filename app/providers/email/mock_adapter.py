"""Mock email provider for testing and local development."""

from typing import Any

from app.providers.email.base import EmailMessage, EmailProvider, EmailResult


class MockEmailProvider(EmailProvider):
    """In-memory provider that records every message.

    WHY MOCK:
    - Unit tests shouldn't hit real APIs (cost, speed, flakiness)
    - Tests read the emailed OTP back from ``calls``
    - Can simulate delivery failures

    Attributes:
        calls: Record of all send() invocations for test assertions.
        fail: When True, every send() reports failure.
    """

    def __init__(self, *, fail: bool = False) -> None:
        self.calls: list[dict[str, Any]] = []
        self.fail = fail

    @property
    def provider_name(self) -> str:
        """Return 'mock' for testing."""
        return "mock"

    async def send(self, recipient: str, message: EmailMessage) -> EmailResult:
        """Record the message and return the configured outcome."""
        self.calls.append(
            {
                "method": "send",
                "recipient": recipient,
                "message": message,
            }
        )
        if self.fail:
            return EmailResult(success=False, error="mock failure")
        return EmailResult(success=True, message_id=f"mock-{len(self.calls)}")

    @property
    def last_message(self) -> EmailMessage | None:
        """Most recently sent message, or None."""
        if not self.calls:
            return None
        message: EmailMessage = self.calls[-1]["message"]
        return message

    def assert_sent_to(self, recipient: str) -> None:
        """Test helper to verify a message went to ``recipient``.

        Raises:
            AssertionError: If no message was sent to the address.
        """
        recipients = [call["recipient"] for call in self.calls]
        assert recipient in recipients, (
            f"No email sent to {recipient!r}. Recipients: {recipients}"
        )
