"""
FastAPI application factory.

Usage:
    welcome-service serve                        # listens on $PORT (4000)
    MONGO_URI=mongodb://mongo:27017/test welcome-service serve

Startup order: the connection supervisor is kicked off without waiting on it,
the seed record is queued behind the first successful connection, and the
server starts accepting requests straight away. Requests that need the store
before it is reachable get a 503.

Shutdown cancels the pending seed and any pending connection retry.
"""

from __future__ import annotations

import asyncio
import contextlib
import re
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from welcome_service import __version__
from welcome_service.api import routes
from welcome_service.config import Settings, get_settings
from welcome_service.exceptions import RecordNotFoundError, StoreUnavailableError
from welcome_service.infrastructure.repository import UserRepository, seed_user
from welcome_service.infrastructure.supervisor import ClientFactory, ConnectionSupervisor
from welcome_service.utils.logging import get_logger

log = get_logger(__name__)

_URI_PASSWORD = re.compile(r"(?<=://)([^:/@]+):([^@]+)@")


def redact_uri(uri: str) -> str:
    """Mask the password portion of a connection URI for logging."""
    return _URI_PASSWORD.sub(r"\1:****@", uri)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    supervisor: ConnectionSupervisor = app.state.supervisor

    log.info("Connecting to %s", redact_uri(settings.mongo_uri))
    supervisor.connect()

    seed_task: Optional[asyncio.Task] = None
    if settings.seed_on_startup:
        seed_task = asyncio.create_task(
            seed_user(
                supervisor,
                app.state.repository,
                name=settings.seed_name,
                timeout=settings.seed_timeout_seconds,
                idempotent=settings.seed_idempotent,
            ),
            name="seed-user",
        )
    app.state.seed_task = seed_task

    log.info("Listening on port %s", settings.port)
    try:
        yield
    finally:
        if seed_task is not None and not seed_task.done():
            seed_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await seed_task
        await supervisor.close()


async def _record_not_found_handler(request: Request, exc: RecordNotFoundError):
    log.warning("No record to greet with", extra={"path": request.url.path})
    return PlainTextResponse("No record found in the database", status_code=404)


async def _store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    log.warning(
        "Request needs the database before it is connected",
        extra={"path": request.url.path, "state": exc.state},
    )
    return PlainTextResponse("Database unavailable, try again shortly", status_code=503)


def create_app(
    settings: Optional[Settings] = None,
    supervisor: Optional[ConnectionSupervisor] = None,
    client_factory: Optional[ClientFactory] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Override the environment-derived settings.
        supervisor: Use a pre-built connection supervisor.
        client_factory: Build the supervisor with a custom driver client
            factory (ignored when `supervisor` is given).

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    if supervisor is None:
        supervisor = ConnectionSupervisor.from_settings(settings, client_factory=client_factory)

    app = FastAPI(
        title="Welcome Service",
        version=__version__,
        description="Greets clients with the user record stored in MongoDB.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.supervisor = supervisor
    app.state.repository = UserRepository(supervisor)
    app.state.seed_task = None

    app.add_exception_handler(RecordNotFoundError, _record_not_found_handler)
    app.add_exception_handler(StoreUnavailableError, _store_unavailable_handler)
    app.include_router(routes.router)
    return app


__all__ = ["create_app", "lifespan", "redact_uri"]
