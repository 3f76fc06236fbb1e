"""FastAPI application."""

from contextlib import asynccontextmanager

import logfire
from fastapi import FastAPI

from commentary.domain.service import NotificationDispatcher
from commentary.interface.api.routes import comments, health
from commentary.util.di.container import create_container, setup_di
from commentary.util.observability import instrument_fastapi, instrument_httpx


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wait for in-flight notification mail before shutting down."""
    yield
    container = app.state.dishka_container
    dispatcher = await container.get(NotificationDispatcher)
    if dispatcher.pending:
        logfire.info("Draining notifications", pending=dispatcher.pending)
    await dispatcher.drain()
    await container.close()


def create_app() -> FastAPI:
    """Create FastAPI application.

    Note: Logfire should be configured before calling this function.
    In production, start_app.py handles this.
    """
    instrument_httpx()

    app_instance = FastAPI(
        title="Commentary API",
        description="Comment moderation, threading and notification service",
        version="0.1.0",
        lifespan=lifespan,
    )

    instrument_fastapi(app_instance)

    container = create_container()
    setup_di(app_instance, container)

    app_instance.include_router(health.router)
    app_instance.include_router(comments.router)

    return app_instance


# Module-level instance served by uvicorn (see scripts/start_app.py)
app = create_app()
