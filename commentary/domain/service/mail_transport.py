"""Mail transport interface."""


class MailTransport:
    """Generic outbound mail interface."""

    async def send(
        self,
        recipient: str,
        subject: str,
        body_text: str,
        body_html: str = "",
        from_email: str = "",
    ) -> None:
        """Send one email.

        Args:
            recipient: Recipient address
            subject: Subject line
            body_text: Plain text body
            body_html: Optional HTML body
            from_email: Sender address (transport default when empty)

        Raises:
            MailDeliveryError: If the message could not be handed off
        """
        raise NotImplementedError
