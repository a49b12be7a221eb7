"""
Realtime feed of domain and URL changes.

Keeps the entity cache live between bulk fetches by applying the create, update
and delete events pushed over the FishFish WebSocket, and reconnects with
exponential backoff whenever the connection drops.
"""

import asyncio
import json
import math
from collections.abc import Callable, Mapping
from enum import StrEnum
from typing import Any

import httpx
import structlog

from fishfish.config import FishFishConfig
from fishfish.core.cache import EntityCache
from fishfish.exceptions import FishFishError
from fishfish.models.auth import SessionToken
from fishfish.models.entities import Category, EntityKind
from fishfish.models.events import EventAction, EventKind, FeedEvent
from fishfish.realtime.transport import SocketConnection, SocketTransport, WebsocketsTransport
from fishfish.services.entity_service import EntityService
from fishfish.services.token_manager import TokenManager

logger = structlog.get_logger(__name__)

EventCallback = Callable[[FeedEvent], None]


class FeedState(StrEnum):
    """Connection state of the feed."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSED = "closed"


def backoff_delay(attempt: int, max_delay: float = 600.0) -> float:
    """
    Delay before reconnect attempt number ``attempt`` (0-based).

    Args:
        attempt: Number of reconnects attempted since the last successful open.
        max_delay: Upper bound in seconds.

    Returns:
        ``min(floor(e ** attempt), max_delay)`` seconds.
    """
    try:
        delay = math.floor(math.exp(attempt))
    except OverflowError:
        return max_delay
    return min(delay, max_delay)


class RealtimeFeed:
    """
    Consumes the FishFish WebSocket and applies its events to the cache.

    States: DISCONNECTED -> CONNECTING -> CONNECTED -> (CLOSED -> CONNECTING)*.
    Any close not requested through ``stop()`` schedules a reconnect; there is no
    attempt limit and reconnect failures never reach the caller.

    Event handlers are synchronous, so reading a cached entry and storing its
    merged replacement cannot interleave with another coroutine.
    """

    def __init__(
        self,
        config: FishFishConfig,
        token_manager: TokenManager,
        cache: EntityCache,
        *,
        transport: SocketTransport | None = None,
        entity_services: Mapping[EntityKind, EntityService] | None = None,
        on_event: EventCallback | None = None,
    ) -> None:
        """
        Args:
            config: Client configuration (URL, identity, resync, debug).
            token_manager: Source of session tokens for the handshake.
            cache: Cache the events are applied to.
            transport: Socket transport. Defaults to ``websockets``.
            entity_services: REST services used by the periodic resync.
            on_event: Called with every event after it was applied.
        """
        self._config = config
        self._tokens = token_manager
        self._cache = cache
        self._transport = transport or WebsocketsTransport(user_agent=config.user_agent)
        self._entities = dict(entity_services or {})
        self._on_event = on_event

        self._handlers: dict[EventAction, Callable[[FeedEvent], None]] = {
            EventAction.CREATE: self._apply_create,
            EventAction.DELETE: self._apply_delete,
            EventAction.UPDATE: self._apply_update,
        }

        self._state = FeedState.DISCONNECTED
        self._attempts = 0
        self._stopped = True
        self._connection: SocketConnection | None = None
        self._listen_task: asyncio.Task[None] | None = None
        self._reconnect_task: asyncio.Task[None] | None = None
        self._resync_task: asyncio.Task[None] | None = None

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is FeedState.CONNECTED

    @property
    def reconnect_attempts(self) -> int:
        """Reconnects attempted since the last successful open."""
        return self._attempts

    async def start(self) -> None:
        """
        Connect and, when enabled, start the periodic resync. Idempotent.

        Raises:
            UnauthorizedError: If no session token can be obtained.
        """
        if not self._stopped:
            return
        await self.connect()
        if self._config.resync and self._entities:
            self._resync_task = asyncio.create_task(self._resync_loop(), name="fishfish-resync")
        logger.info("Realtime feed started", resync=self._config.resync)

    async def connect(self) -> None:
        """
        Acquire a session token and open the connection.

        Token errors are raised. A transport failure counts as a close and goes
        through the reconnect backoff instead.
        """
        self._stopped = False
        try:
            token = await self._tokens.acquire()
        except Exception:
            self._stopped = True
            raise
        await self._open(token)

    async def stop(self) -> None:
        """Cancel pending reconnects and resyncs and close the live connection."""
        self._stopped = True

        tasks = [
            task
            for task in (self._reconnect_task, self._resync_task, self._listen_task)
            if task is not None and not task.done() and task is not asyncio.current_task()
        ]
        for task in tasks:
            task.cancel()
        self._reconnect_task = self._resync_task = self._listen_task = None

        connection, self._connection = self._connection, None
        if connection is not None:
            await connection.close()

        await asyncio.gather(*tasks, return_exceptions=True)
        self._state = FeedState.DISCONNECTED
        logger.info("Realtime feed stopped")

    async def resync(self) -> None:
        """
        Refetch every full listing the session token may read.

        Repairs the cache after events were missed while disconnected. Failures
        are logged.
        """
        try:
            token = await self._tokens.acquire()
        except (FishFishError, httpx.HTTPError) as e:
            logger.warning("Resync skipped, no session token", error_type=type(e).__name__)
            return

        for kind, service in self._entities.items():
            if not token.has_permission(kind.permission):
                logger.debug("Resync skipped, missing permission", kind=kind.value)
                continue
            for category in Category:
                try:
                    await service.get_all(category, full=True)
                except (FishFishError, httpx.HTTPError) as e:
                    logger.warning(
                        "Resync failed",
                        kind=kind.value,
                        category=category.value,
                        error_type=type(e).__name__,
                    )
        logger.debug("Resync complete")

    async def _resync_loop(self) -> None:
        while not self._stopped:
            await self.resync()
            await asyncio.sleep(self._config.resync_interval)

    # -- connection state machine -------------------------------------------

    async def _open(self, token: SessionToken) -> None:
        if self._stopped:
            return

        self._state = FeedState.CONNECTING
        headers = {"Authorization": token.value, "X-Identity": self._config.identity}
        try:
            connection = await self._transport.connect(self._config.websocket_url, headers)
        except Exception as e:
            self._on_error(e)
            self._on_close(None, str(e))
            return

        if self._stopped:
            await connection.close()
            return

        self._connection = connection
        self._on_open()
        self._listen_task = asyncio.create_task(self._listen(connection), name="fishfish-feed")

    async def _listen(self, connection: SocketConnection) -> None:
        try:
            async for raw in connection:
                self._on_message(raw)
        except Exception as e:
            self._on_error(e)

        if self._connection is connection:
            self._connection = None
        code, reason = connection.close_code, connection.close_reason
        try:
            await connection.close()
        except Exception as e:
            self._on_error(e)
        self._on_close(code, reason)

    def _on_open(self) -> None:
        logger.info(
            "WebSocket connected", url=self._config.websocket_url, attempts=self._attempts
        )
        self._state = FeedState.CONNECTED
        self._attempts = 0

    def _on_error(self, error: Exception) -> None:
        logger.warning("WebSocket error", error_type=type(error).__name__, error=str(error))

    def _on_close(self, code: int | None, reason: str | None) -> None:
        if self._stopped:
            return

        self._state = FeedState.CLOSED
        delay = backoff_delay(self._attempts, self._config.reconnect_max_delay)
        self._attempts += 1

        logger.warning(
            "WebSocket closed, reconnecting",
            code=code,
            reason=reason,
            delay=delay,
            attempt=self._attempts,
        )
        self._schedule_reconnect(delay)

    def _schedule_reconnect(self, delay: float) -> None:
        self._reconnect_task = asyncio.create_task(
            self._reconnect_after(delay), name="fishfish-reconnect"
        )

    async def _reconnect_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        if self._stopped:
            return

        try:
            token = await self._tokens.acquire()
        except (FishFishError, httpx.HTTPError) as e:
            self._on_error(e)
            self._on_close(None, "session token unavailable")
            return

        await self._open(token)

    # -- events -------------------------------------------------------------

    def _on_message(self, raw: str | bytes) -> None:
        if self._stopped:
            return

        try:
            payload = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Dropping malformed message")
            return

        event = self._parse_event(payload)
        if event is None:
            return

        if self._config.debug:
            logger.debug("Received event", type=event.kind.value, identifier=event.identifier)

        self.apply(event)

        if self._on_event is not None:
            try:
                self._on_event(event)
            except Exception:
                logger.exception("Event callback failed", type=event.kind.value)

    @staticmethod
    def _parse_event(payload: Any) -> FeedEvent | None:
        if not isinstance(payload, dict):
            logger.warning("Dropping message that is not an object")
            return None

        try:
            kind = EventKind(payload.get("type"))
        except ValueError:
            logger.warning("Ignoring unknown event type", type=payload.get("type"))
            return None

        data = payload.get("data")
        record_type = kind.entity.record_type
        identifier = data.get(record_type.identifier_field) if isinstance(data, dict) else None
        if not isinstance(identifier, str):
            logger.warning("Dropping event without identifier", type=kind.value)
            return None

        try:
            fields = record_type.parse_fields(data)
        except ValueError as e:
            logger.warning("Dropping malformed message", type=kind.value, error=str(e))
            return None

        return FeedEvent(kind=kind, identifier=identifier, fields=fields)

    def apply(self, event: FeedEvent) -> None:
        """Apply an event to the cache. No-op when caching is disabled."""
        if not self._config.cache:
            return
        self._handlers[event.kind.action](event)

    def _apply_create(self, event: FeedEvent) -> None:
        entity = event.kind.entity
        self._cache.set(entity, entity.record_type(**event.fields))

    def _apply_delete(self, event: FeedEvent) -> None:
        self._cache.delete(event.kind.entity, event.identifier)

    def _apply_update(self, event: FeedEvent) -> None:
        self._cache.merge(event.kind.entity, event.identifier, event.fields)
