"""
Socket transport used by the realtime feed.

The feed only relies on the small protocol below; the default implementation
is backed by the ``websockets`` library.
"""

from collections.abc import AsyncIterator, Mapping
from typing import Protocol, runtime_checkable

from websockets.asyncio.client import connect


@runtime_checkable
class SocketConnection(Protocol):
    """
    An open duplex connection.

    Iterating yields incoming messages and stops when the connection closes
    normally; an abnormal close raises. ``close_code`` and ``close_reason`` are
    set once the connection is closed.
    """

    @property
    def close_code(self) -> int | None: ...

    @property
    def close_reason(self) -> str | None: ...

    def __aiter__(self) -> AsyncIterator[str | bytes]: ...

    async def send(self, message: str | bytes) -> None: ...

    async def close(self, code: int = 1000, reason: str = "") -> None: ...


class SocketTransport(Protocol):
    """Opens socket connections. Reconnect policy belongs to the caller."""

    async def connect(self, url: str, headers: Mapping[str, str]) -> SocketConnection: ...


class WebsocketsTransport:
    """SocketTransport backed by ``websockets``."""

    def __init__(
        self,
        *,
        open_timeout: float | None = 10.0,
        ping_interval: float | None = 20.0,
        user_agent: str | None = None,
    ) -> None:
        """
        Args:
            open_timeout: Timeout for the opening handshake in seconds.
            ping_interval: Interval between keepalive pings in seconds.
            user_agent: User-Agent header sent with the handshake.
        """
        self._open_timeout = open_timeout
        self._ping_interval = ping_interval
        self._user_agent = user_agent

    async def connect(self, url: str, headers: Mapping[str, str]) -> SocketConnection:
        options = {}
        if self._user_agent is not None:
            options["user_agent_header"] = self._user_agent
        # Reconnection is handled by the feed, so no retry iterator here
        return await connect(
            url,
            additional_headers=dict(headers),
            open_timeout=self._open_timeout,
            ping_interval=self._ping_interval,
            **options,
        )
