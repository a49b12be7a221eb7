"""
FishFish client configuration.
"""

from dataclasses import dataclass

from fishfish.models.auth import Permission


@dataclass(frozen=True, kw_only=True)
class FishFishConfig:
    """
    Attributes:
        api_url: Base URL for the FishFish REST API.
        websocket_url: URL of the realtime WebSocket endpoint.
        timeout: Request timeout in seconds.
        user_agent: User-Agent header value.
        default_permissions: Permissions requested for session tokens.
        cache: Keep a local cache of domains and URLs.
        do_not_cache_partial: Only cache records from full listings. Partial listings
            only carry identifiers.
        realtime: Open the WebSocket feed when the client starts.
        resync: Periodically refetch every full listing while the feed is running.
            Update events received before their create event (for example a record
            created before the client connected) leave partial cache entries that
            only a resync backfills, so enable this when complete entries matter.
        resync_interval: Seconds between two resyncs.
        reconnect_max_delay: Upper bound of the reconnect backoff in seconds.
        identity: Identity sent to the WebSocket server for attribution.
        debug: Emit a debug event for every realtime message.
    """

    api_url: str = "https://api.fishfish.gg/v1"
    websocket_url: str = "wss://api.fishfish.gg/v1/users/@me/ws"
    timeout: float = 30.0
    user_agent: str = "fishfish-python/0.1.0"
    default_permissions: frozenset[Permission] = frozenset({Permission.DOMAINS, Permission.URLS})
    cache: bool = True
    do_not_cache_partial: bool = False
    realtime: bool = False
    resync: bool = False
    resync_interval: float = 3600.0
    reconnect_max_delay: float = 600.0
    identity: str = "fishfish-python"
    debug: bool = False

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)
        if len(self.default_permissions) == 0:
            msg = "default_permissions must contain at least one permission"
            raise ValueError(msg)
        if self.resync_interval <= 0:
            msg = "resync_interval must be positive"
            raise ValueError(msg)
        if self.reconnect_max_delay <= 0:
            msg = "reconnect_max_delay must be positive"
            raise ValueError(msg)
        if not self.identity:
            msg = "identity must not be empty"
            raise ValueError(msg)
        # Accept any iterable of permission strings
        object.__setattr__(
            self, "default_permissions", frozenset(Permission(p) for p in self.default_permissions)
        )
