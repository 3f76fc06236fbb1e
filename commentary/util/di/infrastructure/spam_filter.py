"""Spam filter infrastructure providers."""

import logfire
from dishka import Scope, provide

from commentary.adapter.akismet import AkismetSpamFilter
from commentary.config import Settings
from commentary.domain.service import NoopSpamFilter, SpamFilter
from commentary.util.di.base import ProviderBase


class SpamFilterProvider(ProviderBase):
    """Spam filter component base."""

    __mock_component__ = "spam_filter"


class ProdSpamFilterProvider(SpamFilterProvider):
    """Production spam filter provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_spam_filter(self, settings: Settings) -> SpamFilter:
        """Provide Akismet, or a filter that never flags spam without a key."""
        if not settings.spam_filter.akismet_api_key:
            logfire.info("No Akismet key configured, spam filtering disabled")
            return NoopSpamFilter()
        return AkismetSpamFilter(
            api_key=settings.spam_filter.akismet_api_key,
            site_url=settings.spam_filter.site_url,
            timeout=settings.spam_filter.timeout_seconds,
        )
