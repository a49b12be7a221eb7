"""
Realtime WebSocket feed keeping the entity cache up to date.
"""

from fishfish.realtime.feed import FeedState, RealtimeFeed, backoff_delay
from fishfish.realtime.transport import SocketConnection, SocketTransport, WebsocketsTransport

__all__ = [
    "FeedState",
    "RealtimeFeed",
    "SocketConnection",
    "SocketTransport",
    "WebsocketsTransport",
    "backoff_delay",
]
