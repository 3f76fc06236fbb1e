"""Adapter layer errors."""


class AdapterError(Exception):
    """Base adapter error."""

    pass


class ProviderError(AdapterError):
    """External provider error."""

    pass


class MailDeliveryError(ProviderError):
    """The mail API refused or failed to accept a message."""

    pass


class SpamFilterError(ProviderError):
    """The spam classification service failed."""

    pass
