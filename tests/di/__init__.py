"""Mock providers for testing."""

from .mail import MockMailProvider
from .persistence import MockPersistenceProvider
from .spam_filter import MockSpamFilterProvider
from .container import build_test_container

__all__ = [
    "MockMailProvider",
    "MockPersistenceProvider",
    "MockSpamFilterProvider",
    "build_test_container",
]
