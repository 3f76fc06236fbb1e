"""Outgoing notification payload."""

from typing import Optional

from commentary.domain.model.common import DomainModel


class Notification(DomainModel):
    """One email to one recipient.

    ``unsubscribe_url`` is set for subscriber mail and left empty for admin
    and confirmation mail.
    """

    recipient: str
    subject: str
    body_text: str
    body_html: str = ""
    unsubscribe_url: Optional[str] = None
    from_email: str = ""
