"""Test harness for unit, integration and E2E tests.

Settings are loaded from environment variables (configure via .env or
export). Integration tests that unmock persistence expect PostgreSQL at
DATABASE__URL with migrations applied.
"""

import pytest_asyncio

from commentary.domain.service import NotificationDispatcher
from commentary.util.di import Component
from tests.di import build_test_container


def create_env_fixture(unmock: set[Component] | None = None):
    """Factory for creating test environment fixtures.

    Creates a pytest fixture that:
    - Builds a test container with specified unmocking
    - Yields request-scoped container for service access
    - Drains in-flight notification mail before the container closes

    Args:
        unmock: Components to use real implementations for

    Returns:
        Pytest fixture function that yields AsyncContainer

    Usage:
        # Unit tests - everything mocked
        unit_env = create_env_fixture()

        # Integration tests - real persistence, assumes postgres running
        integration_env = create_env_fixture(unmock={"persistence"})

        @pytest.mark.asyncio
        async def test_submit(unit_env):
            service = await unit_env.get(CommentService)
            saved = await service.submit(comment, ROOT_PARENT_ID)
            assert saved.id
    """

    @pytest_asyncio.fixture
    async def _test_environment():
        container = build_test_container(unmock=unmock or set())

        async with container() as request_container:
            yield request_container

        dispatcher = await container.get(NotificationDispatcher)
        await dispatcher.drain()
        await container.close()

    return _test_environment
