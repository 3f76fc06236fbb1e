"""Mock mail providers for testing."""

from dishka import Scope, provide

from commentary.adapter.mail import MockMailTransport
from commentary.domain.service import MailTransport
from commentary.util.di.infrastructure.mail import MailProvider


class MockMailProvider(MailProvider):
    """Mock mail provider collecting messages in an outbox."""

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_mail_transport(self) -> MailTransport:
        """Provide mock mail transport."""
        return MockMailTransport()
