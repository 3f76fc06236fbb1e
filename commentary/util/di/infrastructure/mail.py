"""Mail infrastructure providers."""

import logfire
from dishka import Scope, provide

from commentary.adapter.mail import HttpMailTransport, LogMailTransport
from commentary.config import Settings
from commentary.domain.service import MailTransport
from commentary.util.di.base import ProviderBase


class MailProvider(ProviderBase):
    """Mail component base."""

    __mock_component__ = "mail"


class ProdMailProvider(MailProvider):
    """Production mail provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_mail_transport(self, settings: Settings) -> MailTransport:
        """Provide mail transport.

        Without MAIL__API_URL messages are only logged.
        """
        if not settings.mail.api_url:
            logfire.warn("No mail API configured, notifications will only be logged")
            return LogMailTransport()
        return HttpMailTransport(
            api_url=settings.mail.api_url,
            api_key=settings.mail.api_key,
            default_from=settings.site.from_email,
            timeout=settings.mail.timeout_seconds,
        )
