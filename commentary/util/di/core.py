"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from commentary.config import NotificationSettings, Settings, SiteSettings
from commentary.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide(scope=Scope.APP)
    def provide_site_settings(self, settings: Settings) -> SiteSettings:
        return settings.site

    @provide(scope=Scope.APP)
    def provide_notification_settings(
        self, settings: Settings
    ) -> NotificationSettings:
        return settings.notifications
