"""Email delivery via the Resend HTTP API.

Simple HTTP POST per message. No retries: the reset flow surfaces
failure to the user, who can request a new code.
"""

import logging

import httpx

from app.providers.email.base import EmailMessage, EmailProvider, EmailResult

logger = logging.getLogger(__name__)

_RESEND_TIMEOUT = 10.0


class ResendEmailAdapter(EmailProvider):
    """Resend implementation of EmailProvider.

    Args:
        api_key: Resend API key.
        sender: From address.
        api_url: Resend emails endpoint.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests pass httpx.MockTransport).
    """

    def __init__(
        self,
        *,
        api_key: str,
        sender: str,
        api_url: str = "https://api.resend.com/emails",
        timeout: float = _RESEND_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._sender = sender
        self._api_url = api_url
        self._timeout = timeout
        self._transport = transport

    @property
    def provider_name(self) -> str:
        """Return 'resend'."""
        return "resend"

    async def send(self, recipient: str, message: EmailMessage) -> EmailResult:
        """Send one message through Resend.

        Args:
            recipient: Destination email address.
            message: Rendered message.

        Returns:
            EmailResult with the Resend message id on success.
        """
        if not self._api_key:
            logger.warning("RESEND_API_KEY is not configured; email not sent")
            return EmailResult(success=False, error="email provider not configured")

        payload: dict[str, str] = {
            "from": self._sender,
            "to": recipient,
            "subject": message.subject,
            "text": message.text,
        }
        if message.html:
            payload["html"] = message.html

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.post(
                    self._api_url,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                    json=payload,
                    timeout=self._timeout,
                )
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Failed to send email via Resend", exc_info=True)
            return EmailResult(success=False, error=type(exc).__name__)

        message_id: str | None = None
        try:
            message_id = resp.json().get("id")
        except ValueError:
            logger.debug("Resend response body was not JSON")
        logger.info("Email sent via Resend (id=%s)", message_id)
        return EmailResult(success=True, message_id=message_id)
