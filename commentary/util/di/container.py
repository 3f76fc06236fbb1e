"""Dependency injection container."""

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka

from commentary.util.di import PROVIDERS, get_provider


def create_container(with_fastapi: bool = True) -> AsyncContainer:
    """Build production container (all prod implementations).

    Settings are loaded from environment variables automatically.

    Args:
        with_fastapi: Register the FastAPI request context. Scripts running
            outside the web app (spam purge) pass False.

    Returns:
        Configured DI container with production providers
    """
    providers = [get_provider(base, use_mock=False)() for base in PROVIDERS]
    if with_fastapi:
        providers.append(FastapiProvider())
    return make_async_container(*providers)


def setup_di(app, container: AsyncContainer) -> None:
    """Attach a container to the FastAPI app.

    Tests call this a second time to swap in a container built with mocks.
    """
    setup_dishka(container, app)
