"""
FishFish client facade.

This is the main entry point for users of the library. It wires the HTTP client,
the session token manager, the entity cache and the optional realtime feed
together behind one object.
"""

import asyncio
import os
from typing import Self

import httpx
import structlog

from fishfish.api.endpoints.status import get_status
from fishfish.api.http_client import AsyncHttpClient
from fishfish.config import FishFishConfig
from fishfish.core.cache import EntityCache
from fishfish.exceptions import CacheDisabledError, InvalidInputError
from fishfish.models.entities import ApiStatus, Category, Domain, EntityKind, Url
from fishfish.realtime.feed import EventCallback, RealtimeFeed
from fishfish.realtime.transport import SocketTransport
from fishfish.services.admin_service import AdminService
from fishfish.services.entity_service import EntityService
from fishfish.services.token_manager import TokenManager

logger = structlog.get_logger(__name__)

API_KEY_ENV_VAR = "FISHFISH_API_KEY"


class FishFishClient:
    """
    Async client for the FishFish API.

    Example:
        ```python
        async with FishFishClient("my-api-key") as client:
            domain = await client.get_domain("example.com")

            phishing = await client.get_all_domains(Category.PHISHING, full=True)

            await client.insert_url(
                "https://example.com/login",
                category=Category.PHISHING,
                description="Fake login page",
            )
        ```

    Args:
        api_key: API key. Falls back to the FISHFISH_API_KEY environment variable.
        config: Client configuration. Uses defaults if not provided.
        transport: Optional httpx transport for testing (mock transport).
        socket_transport: Optional socket transport for the realtime feed.
        on_event: Called with every realtime event after it was applied.
    """

    def __init__(
        self,
        api_key: str | None = None,
        config: FishFishConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        socket_transport: SocketTransport | None = None,
        on_event: EventCallback | None = None,
    ) -> None:
        """
        Initialize the FishFish client.

        Raises:
            InvalidInputError: If no API key is given or found in the environment.
        """
        api_key = api_key if api_key is not None else os.environ.get(API_KEY_ENV_VAR)
        if api_key is None:
            msg = f"No API key provided and {API_KEY_ENV_VAR} is not set"
            raise InvalidInputError(msg)

        self._config = config or FishFishConfig()
        self._http = AsyncHttpClient(self._config, transport=transport)
        self._tokens = TokenManager(self._http, api_key, self._config.default_permissions)
        self._cache = EntityCache()
        self._entities = {
            kind: EntityService(self._http, self._tokens, self._cache, kind, self._config)
            for kind in EntityKind
        }
        self._admin = AdminService(self._http, self._tokens)
        self._feed: RealtimeFeed | None = None
        if self._config.realtime:
            self._feed = RealtimeFeed(
                self._config,
                self._tokens,
                self._cache,
                transport=socket_transport,
                entity_services=self._entities,
                on_event=on_event,
            )

        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def __aenter__(self) -> Self:
        """Enter async context."""
        await self._ensure_initialized()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object
    ) -> None:
        """Exit async context."""
        await self.close()

    async def _ensure_initialized(self) -> None:
        async with self._init_lock:
            if self._initialized:
                return

            await self._http.__aenter__()

            if self._feed is not None:
                try:
                    await self._feed.start()
                except Exception:
                    self._tokens.close()
                    await self._http.__aexit__(None, None, None)
                    raise

            self._initialized = True
            logger.debug("Client initialized", realtime=self._feed is not None)

    async def close(self) -> None:
        """Stop the realtime feed, cancel token timers and release the HTTP client."""
        async with self._init_lock:
            if self._feed is not None:
                await self._feed.stop()

            self._tokens.close()

            if self._initialized:
                await self._http.__aexit__(None, None, None)

            self._initialized = False
            logger.debug("Client closed")

    @property
    def config(self) -> FishFishConfig:
        return self._config

    @property
    def cache(self) -> EntityCache:
        """
        The local cache of domains and URLs.

        Raises:
            CacheDisabledError: If caching is disabled in the configuration.
        """
        if not self._config.cache:
            raise CacheDisabledError()
        return self._cache

    @property
    def tokens(self) -> TokenManager:
        return self._tokens

    @property
    def has_session_token(self) -> bool:
        """Check if a valid session token is held."""
        return self._tokens.has_valid_token

    @property
    def domains(self) -> EntityService:
        return self._entities[EntityKind.DOMAINS]

    @property
    def urls(self) -> EntityService:
        return self._entities[EntityKind.URLS]

    @property
    def admin(self) -> AdminService:
        return self._admin

    @property
    def feed(self) -> RealtimeFeed | None:
        """The realtime feed, or None when disabled."""
        return self._feed

    async def get_status(self) -> ApiStatus:
        """Get the status and metrics of the API."""
        await self._ensure_initialized()
        return await get_status(self._http)

    # Domains

    async def get_domain(self, domain: str, *, cache: bool = True, force: bool = False) -> Domain:
        """
        Get a single domain, from the cache when possible.

        Args:
            domain: Domain name.
            cache: Store the fetched record.
            force: Skip the cache and refetch.
        """
        await self._ensure_initialized()
        return await self.domains.get(domain, cache=cache, force=force)

    async def get_all_domains(
        self, category: Category | str, *, full: bool = False, cache: bool = True
    ) -> list[Domain] | list[str]:
        """
        List the domains of a category.

        Returns:
            Full records when ``full`` is set (needs the domains permission),
            domain names otherwise.
        """
        await self._ensure_initialized()
        return await self.domains.get_all(category, full=full, cache=cache)

    async def insert_domain(
        self,
        domain: str,
        category: Category | str | None = None,
        description: str | None = None,
        target: str | None = None,
    ) -> Domain:
        """Insert a new domain. Needs the domains permission."""
        await self._ensure_initialized()
        return await self.domains.insert(
            domain, category=category, description=description, target=target
        )

    async def patch_domain(
        self,
        domain: str,
        category: Category | str | None = None,
        description: str | None = None,
        target: str | None = None,
    ) -> Domain:
        """Update a domain. Needs the domains permission."""
        await self._ensure_initialized()
        return await self.domains.patch(
            domain, category=category, description=description, target=target
        )

    async def delete_domain(self, domain: str) -> bool:
        """Delete a domain. Needs the domains permission."""
        await self._ensure_initialized()
        return await self.domains.delete(domain)

    # URLs

    async def get_url(self, url: str, *, cache: bool = True, force: bool = False) -> Url:
        """
        Get a single URL, from the cache when possible.

        Args:
            url: The URL.
            cache: Store the fetched record.
            force: Skip the cache and refetch.
        """
        await self._ensure_initialized()
        return await self.urls.get(url, cache=cache, force=force)

    async def get_all_urls(
        self, category: Category | str, *, full: bool = False, cache: bool = True
    ) -> list[Url] | list[str]:
        """
        List the URLs of a category.

        Returns:
            Full records when ``full`` is set (needs the urls permission),
            URLs otherwise.
        """
        await self._ensure_initialized()
        return await self.urls.get_all(category, full=full, cache=cache)

    async def insert_url(
        self,
        url: str,
        category: Category | str | None = None,
        description: str | None = None,
        target: str | None = None,
    ) -> Url:
        """Insert a new URL. Needs the urls permission."""
        await self._ensure_initialized()
        return await self.urls.insert(
            url, category=category, description=description, target=target
        )

    async def patch_url(
        self,
        url: str,
        category: Category | str | None = None,
        description: str | None = None,
        target: str | None = None,
    ) -> Url:
        """Update a URL. Needs the urls permission."""
        await self._ensure_initialized()
        return await self.urls.patch(
            url, category=category, description=description, target=target
        )

    async def delete_url(self, url: str) -> bool:
        """Delete a URL. Needs the urls permission."""
        await self._ensure_initialized()
        return await self.urls.delete(url)
