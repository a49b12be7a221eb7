"""
Domain and URL operations with read-through caching.
"""

from typing import Any

import structlog

from fishfish.api.endpoints.entities import (
    create_entity,
    delete_entity,
    get_entity,
    list_entities,
    update_entity,
)
from fishfish.api.http_client import AsyncHttpClient
from fishfish.config import FishFishConfig
from fishfish.core.cache import EntityCache
from fishfish.exceptions import ForbiddenError, InvalidInputError
from fishfish.models.auth import SessionToken
from fishfish.models.entities import Category, EntityKind, Record
from fishfish.services.token_manager import TokenManager

logger = structlog.get_logger(__name__)


def validate_identifier(identifier: Any, kind: EntityKind) -> str:
    """Raise InvalidInputError unless ``identifier`` is a non-empty string."""
    if not isinstance(identifier, str):
        msg = f"Expected a string but received: {type(identifier).__name__}"
        raise InvalidInputError(msg, kind=kind.value)
    if len(identifier) == 0:
        msg = "Identifier must not be empty"
        raise InvalidInputError(msg, kind=kind.value)
    return identifier


def validate_category(category: Any) -> Category:
    """Raise InvalidInputError unless ``category`` names a known category."""
    if category is None:
        msg = "You need to provide a category"
        raise InvalidInputError(msg)
    try:
        return Category(category)
    except ValueError as e:
        msg = f"Unknown category: {category!r}"
        raise InvalidInputError(msg) from e


class EntityService:
    """
    REST operations for one entity kind.

    Mutations and full listings require a session token carrying the kind's
    permission; the check happens locally, before the entity endpoint is called.
    Results are written to the shared cache when caching is enabled.
    """

    def __init__(
        self,
        http_client: AsyncHttpClient,
        token_manager: TokenManager,
        cache: EntityCache,
        kind: EntityKind,
        config: FishFishConfig,
    ) -> None:
        """
        Args:
            http_client: HTTP client for API requests.
            token_manager: Source of session tokens.
            cache: Cache shared with the realtime feed.
            kind: Domains or URLs.
            config: Client configuration (cache policy).
        """
        self._http = http_client
        self._tokens = token_manager
        self._cache = cache
        self._kind = kind
        self._config = config

    @property
    def kind(self) -> EntityKind:
        return self._kind

    async def get(self, identifier: str, *, cache: bool = True, force: bool = False) -> Record:
        """
        Get a single record.

        Args:
            identifier: Domain name or URL.
            cache: Store the fetched record.
            force: Refetch even if the record is cached.

        Returns:
            The record, from the cache when present and ``force`` is false. An
            entry stored by a partial listing is returned as is, with only its
            identifier set; check ``is_partial`` and pass ``force=True`` to fetch
            the full record.
        """
        validate_identifier(identifier, self._kind)

        if self._config.cache and not force:
            cached = self._cache.get(self._kind, identifier)
            if cached is not None:
                return cached

        token = await self._tokens.acquire()
        record = await get_entity(self._http, self._kind, identifier, session_token=token.value)

        if self._config.cache and cache:
            self._cache.set(self._kind, record, key=identifier)

        return record

    async def get_all(
        self,
        category: Category | str,
        *,
        full: bool = False,
        cache: bool = True,
    ) -> list[Record] | list[str]:
        """
        List every record of a category.

        Partial listings are public and only return identifiers. Full listings
        need the kind's permission.

        Args:
            category: Category to filter by.
            full: Return full records.
            cache: Store the results, subject to the ``do_not_cache_partial`` policy.

        Returns:
            Records when ``full`` is set, identifiers otherwise.
        """
        category = validate_category(category)

        session_token = None
        if full:
            session_token = (await self._authorize()).value

        results = await list_entities(
            self._http, self._kind, category, full=full, session_token=session_token
        )

        if self._config.cache and cache and (full or not self._config.do_not_cache_partial):
            if full:
                for record in results:
                    self._cache.set(self._kind, record)
            else:
                self._cache.set_partial(self._kind, results)

        logger.debug(
            "Fetched listing",
            kind=self._kind.value,
            category=category.value,
            full=full,
            count=len(results),
        )
        return results

    async def insert(
        self,
        identifier: str,
        category: Category | str | None = None,
        description: str | None = None,
        target: str | None = None,
    ) -> Record:
        """
        Insert a new record.

        Args:
            identifier: Domain name or URL.
            category: Category of the entry. Required.
            description: Why the entry is flagged. Required.
            target: Optional target of the entry (e.g. impersonated brand).

        Returns:
            The inserted record.
        """
        validate_identifier(identifier, self._kind)
        if category is None or description is None:
            msg = "The category and description fields are required when creating a new entry"
            raise InvalidInputError(msg)

        body: dict[str, Any] = {
            "category": str(validate_category(category)),
            "description": description,
        }
        if target is not None:
            body["target"] = target

        token = await self._authorize()
        record = await create_entity(
            self._http, self._kind, identifier, body, session_token=token.value
        )

        if self._config.cache:
            self._cache.set(self._kind, record, key=identifier)

        logger.info("Inserted entry", kind=self._kind.value, identifier=identifier)
        return record

    async def patch(
        self,
        identifier: str,
        category: Category | str | None = None,
        description: str | None = None,
        target: str | None = None,
    ) -> Record:
        """
        Update fields of an existing record.

        Args:
            identifier: Domain name or URL.
            category: New category.
            description: New description.
            target: New target.

        Returns:
            The updated record.
        """
        validate_identifier(identifier, self._kind)

        body: dict[str, Any] = {}
        if category is not None:
            body["category"] = str(validate_category(category))
        if description is not None:
            body["description"] = description
        if target is not None:
            body["target"] = target
        if not body:
            msg = "You need to provide at least one field to update"
            raise InvalidInputError(msg)

        token = await self._authorize()
        record = await update_entity(
            self._http, self._kind, identifier, body, session_token=token.value
        )

        if self._config.cache:
            self._cache.set(self._kind, record, key=identifier)

        logger.info("Patched entry", kind=self._kind.value, identifier=identifier)
        return record

    async def delete(self, identifier: str) -> bool:
        """
        Delete a record.

        Returns:
            True on success.
        """
        validate_identifier(identifier, self._kind)

        token = await self._authorize()
        await delete_entity(self._http, self._kind, identifier, session_token=token.value)

        if self._config.cache:
            self._cache.delete(self._kind, identifier)

        logger.info("Deleted entry", kind=self._kind.value, identifier=identifier)
        return True

    async def _authorize(self) -> SessionToken:
        token = await self._tokens.acquire()
        permission = self._kind.permission
        if not token.has_permission(permission):
            raise ForbiddenError(permission)
        return token
