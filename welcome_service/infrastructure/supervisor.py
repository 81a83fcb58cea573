"""
MongoDB connection supervisor for the welcome service.

Owns the lifecycle of the single logical connection to the document store:

    DISCONNECTED -> CONNECTING -> CONNECTED            (ping succeeded)
    CONNECTING -> DISCONNECTED -> (delay) -> CONNECTING (ping failed)

`connect()` never blocks the caller. The attempt loop runs as a background
task on the running event loop and retries on a fixed delay, forever, using
tenacity. There is no maximum attempt count and no backoff. A failure is
logged and never escalated, so the HTTP server keeps serving while the store
is unreachable.

The "connected" notice is wired once: it is logged for the first successful
connection of the supervisor's lifetime and stays silent for later reconnect
cycles. A drop after CONNECTED is left to the driver's own reconnection; the
supervisor does not observe it.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
from typing import Any, Awaitable, Callable, Optional

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_never, wait_fixed

from welcome_service.config import Settings
from welcome_service.exceptions import StoreUnavailableError
from welcome_service.utils.logging import get_logger

log = get_logger(__name__)

ClientFactory = Callable[..., Any]
SleepFn = Callable[[float], Awaitable[None]]

_RETRYABLE_ERRORS = (PyMongoError, OSError)


class ConnectionState(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


def default_client_factory(uri: str, **options: Any) -> AsyncMongoClient:
    """Build a pymongo asyncio client; the connection itself is opened lazily."""
    return AsyncMongoClient(uri, **options)


class ConnectionSupervisor:
    """
    Connect to MongoDB in the background and retry on a fixed delay until it works.

    Parameters
    ----------
    uri : str
        Connection descriptor (``mongodb://`` or ``mongodb+srv://`` URI).
    retry_delay_seconds : float
        Fixed wait between a failed attempt and the next one.
    server_selection_timeout_ms : int
        How long a single attempt may wait for a reachable server.
    default_database : str
        Database used when the URI does not name one.
    client_factory : callable, optional
        ``factory(uri, **options)`` returning a client with an async
        ``admin.command("ping")``, ``get_default_database()`` and ``close()``.
        Defaults to :class:`pymongo.AsyncMongoClient`.
    sleep : callable, optional
        Coroutine function used to wait out the retry delay.
    """

    def __init__(
        self,
        uri: str,
        retry_delay_seconds: float = 5.0,
        server_selection_timeout_ms: int = 30_000,
        default_database: str = "test",
        client_factory: Optional[ClientFactory] = None,
        sleep: Optional[SleepFn] = None,
    ) -> None:
        self.uri = uri
        self.retry_delay_seconds = retry_delay_seconds
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self.default_database = default_database
        self._client_factory = client_factory or default_client_factory
        self._sleep = sleep or asyncio.sleep

        self._state = ConnectionState.DISCONNECTED
        self._client: Optional[Any] = None
        self._task: Optional[asyncio.Task[None]] = None
        self._connected = asyncio.Event()
        self._open_observed = False
        self.attempts = 0

    @classmethod
    def from_settings(
        cls, settings: Settings, client_factory: Optional[ClientFactory] = None
    ) -> "ConnectionSupervisor":
        return cls(
            uri=settings.mongo_uri,
            retry_delay_seconds=settings.mongo_retry_delay_seconds,
            server_selection_timeout_ms=settings.mongo_server_selection_timeout_ms,
            default_database=settings.mongo_default_database,
            client_factory=client_factory,
        )

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def client(self) -> Any:
        if not self.is_connected or self._client is None:
            raise StoreUnavailableError(self._state.value)
        return self._client

    @property
    def database(self) -> Any:
        """Handle to the configured database; raises while not connected."""
        return self.client.get_default_database(self.default_database)

    def connect(self) -> asyncio.Task[None]:
        """
        Schedule a connection cycle and return its task without waiting on it.

        While a cycle is still pending the same task is returned. Once connected,
        calling this again drops the current client and starts a new cycle.
        """
        if self._task is not None and not self._task.done():
            return self._task
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._supervise(), name="mongo-connection-supervisor")
        self._task.add_done_callback(self._on_task_done)
        return self._task

    async def wait_connected(self, timeout: Optional[float] = None) -> bool:
        """Wait until CONNECTED; returns False if `timeout` elapses first."""
        try:
            await asyncio.wait_for(self._connected.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return True

    async def close(self) -> None:
        """Cancel any pending attempt or retry delay and close the client."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self._release_client()
        self._set_state(ConnectionState.DISCONNECTED)

    async def _supervise(self) -> None:
        self._set_state(ConnectionState.CONNECTING)
        await self._release_client()
        retrying = AsyncRetrying(
            stop=stop_never,
            wait=wait_fixed(self.retry_delay_seconds),
            retry=retry_if_exception_type(_RETRYABLE_ERRORS),
            before_sleep=self._on_attempt_failed,
            sleep=self._sleep,
            reraise=True,
        )
        client = None
        async for attempt in retrying:
            with attempt:
                self._set_state(ConnectionState.CONNECTING)
                client = await self._attempt()
        self._client = client
        self._set_state(ConnectionState.CONNECTED)
        self._on_open()

    async def _attempt(self) -> Any:
        self.attempts += 1
        client = self._client_factory(
            self.uri, serverSelectionTimeoutMS=self.server_selection_timeout_ms
        )
        try:
            await client.admin.command("ping")
        except BaseException:
            await client.close()
            raise
        return client

    def _on_attempt_failed(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        log.error(
            "There was a problem connecting to mongo: %s",
            exc,
            extra={"attempt": retry_state.attempt_number, "error_type": type(exc).__name__},
        )
        log.info("Trying again in %.1fs", self.retry_delay_seconds)
        self._set_state(ConnectionState.DISCONNECTED)

    def _on_open(self) -> None:
        # Only the first open is announced; reconnect cycles stay silent.
        if self._open_observed:
            return
        self._open_observed = True
        log.info("Successfully connected to mongo", extra={"attempts": self.attempts})

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error(
                "Connection supervisor stopped on a non-retryable error",
                exc_info=(type(exc), exc, exc.__traceback__),
            )
            self._set_state(ConnectionState.DISCONNECTED)

    async def _release_client(self) -> None:
        client, self._client = self._client, None
        self._connected.clear()
        if client is not None:
            await client.close()

    def _set_state(self, state: ConnectionState) -> None:
        if state is not self._state:
            log.debug("Mongo connection %s -> %s", self._state.value, state.value)
        self._state = state
        if state is ConnectionState.CONNECTED:
            self._connected.set()
        else:
            self._connected.clear()


__all__ = ["ConnectionState", "ConnectionSupervisor", "default_client_factory"]
