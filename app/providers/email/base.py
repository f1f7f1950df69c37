"""Abstract base class and types for email providers.

The reset flow only needs one capability: deliver a message to one
recipient and report whether it worked.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class EmailMessage:
    """Rendered email ready for delivery.

    Attributes:
        subject: Subject line.
        text: Plain-text body.
        html: Optional HTML body.
    """

    subject: str
    text: str
    html: str | None = None


@dataclass(frozen=True)
class EmailResult:
    """Outcome of a delivery attempt.

    Attributes:
        success: True if the provider accepted the message.
        message_id: Provider message id, when available.
        error: Short failure description (never sent to clients).
    """

    success: bool
    message_id: str | None = None
    error: str | None = None


class EmailProvider(ABC):
    """Abstract base class for email providers.

    WHY RESULT INSTEAD OF EXCEPTIONS:
    - The request phase must fail on delivery errors, the confirmation
      phase must not; the caller decides
    - Network failures are expected, not exceptional
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider identifier (e.g. "resend")."""
        ...

    @abstractmethod
    async def send(self, recipient: str, message: EmailMessage) -> EmailResult:
        """Deliver a message to a single recipient.

        Args:
            recipient: Destination email address.
            message: Rendered message.

        Returns:
            EmailResult describing the outcome. Delivery failures are
            reported here and never raised.
        """
        ...
