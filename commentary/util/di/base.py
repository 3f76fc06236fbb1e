"""Base classes for dependency injection providers."""

from typing import ClassVar, Literal

from dishka import Provider

# Infrastructure that tests may swap for in-memory or recording fakes
Component = Literal["persistence", "mail", "spam_filter"]


class ProviderBase(Provider):
    """Base for all commentary providers.

    Attributes:
        __mock_component__: Component a mockable provider base stands for,
            None for concrete providers (config, domain, application)
        __is_mock__: Whether a subclass is the test implementation
        __depends_on__: Components that must also be unmocked alongside
            this one
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False
    __depends_on__: ClassVar[set[Component]] = set()
