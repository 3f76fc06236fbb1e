"""Mail transport implementations.

Messages are posted as JSON to an HTTP mail API (the shape accepted by
most transactional mail services behind a small relay).
"""

from dataclasses import dataclass

import httpx
import logfire

from commentary.adapter.error import MailDeliveryError
from commentary.domain.service.mail_transport import MailTransport


class HttpMailTransport(MailTransport):
    """Mail transport backed by an HTTP mail API."""

    def __init__(
        self,
        api_url: str,
        api_key: str | None,
        default_from: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize HTTP mail transport.

        Args:
            api_url: Endpoint accepting one message per POST
            api_key: Bearer token for the API (optional)
            default_from: Sender used when a message has none
            timeout: Request timeout in seconds
            transport: httpx transport override (tests)
        """
        self.api_url = api_url
        self.api_key = api_key
        self.default_from = default_from
        self.timeout = timeout
        self.transport = transport

    async def send(
        self,
        recipient: str,
        subject: str,
        body_text: str,
        body_html: str = "",
        from_email: str = "",
    ) -> None:
        """Post one message to the mail API.

        Raises:
            MailDeliveryError: On transport errors or a non-2xx response
        """
        payload = {
            "from": from_email or self.default_from,
            "to": [recipient],
            "subject": subject,
            "text": body_text,
        }
        if body_html:
            payload["html"] = body_html

        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(
                    self.api_url,
                    json=payload,
                    headers=headers,
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            logfire.error("Mail API HTTP error", recipient=recipient, error=str(e))
            raise MailDeliveryError(f"HTTP error sending mail: {e}")

        if response.status_code >= 300:
            logfire.error(
                "Mail API rejected message",
                recipient=recipient,
                status_code=response.status_code,
                error=response.text[:500],
            )
            raise MailDeliveryError(f"Mail API returned {response.status_code}")

        logfire.info("Mail sent", recipient=recipient, subject=subject)


class LogMailTransport(MailTransport):
    """Transport used when no mail API is configured: only logs messages."""

    async def send(
        self,
        recipient: str,
        subject: str,
        body_text: str,
        body_html: str = "",
        from_email: str = "",
    ) -> None:
        logfire.info(
            "Mail not sent (no mail API configured)",
            recipient=recipient,
            subject=subject,
            from_email=from_email,
        )


@dataclass
class SentMail:
    recipient: str
    subject: str
    body_text: str
    body_html: str
    from_email: str


class MockMailTransport(MailTransport):
    """Mock mail transport for testing.

    Keeps sent messages in ``outbox``. Setting ``failures`` makes the next
    that many sends raise, to exercise delivery retries.
    """

    def __init__(self, failures: int = 0) -> None:
        self.outbox: list[SentMail] = []
        self.failures = failures
        self.attempts = 0

    async def send(
        self,
        recipient: str,
        subject: str,
        body_text: str,
        body_html: str = "",
        from_email: str = "",
    ) -> None:
        self.attempts += 1
        if self.failures > 0:
            self.failures -= 1
            raise MailDeliveryError("Simulated mail failure")
        self.outbox.append(
            SentMail(
                recipient=recipient,
                subject=subject,
                body_text=body_text,
                body_html=body_html,
                from_email=from_email,
            )
        )

    def sent_to(self, recipient: str) -> list[SentMail]:
        return [m for m in self.outbox if m.recipient == recipient]
