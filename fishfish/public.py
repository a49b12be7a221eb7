"""
Anonymous access to the public FishFish endpoints.

These functions need no API key and never touch a cache. They take the HTTP
client explicitly, so they can share one with a FishFishClient or run standalone:

    ```python
    async with AsyncHttpClient(FishFishConfig()) as http:
        phishing = await get_all_domains(http, Category.PHISHING)
    ```
"""

from fishfish.api.endpoints.entities import get_entity, list_entities
from fishfish.api.endpoints.status import get_status
from fishfish.api.http_client import AsyncHttpClient
from fishfish.models.entities import Category, Domain, EntityKind, Url
from fishfish.services.entity_service import validate_category, validate_identifier

__all__ = ["get_all_domains", "get_all_urls", "get_domain", "get_status", "get_url"]


async def get_all_domains(http: AsyncHttpClient, category: Category | str) -> list[str]:
    """List the names of every domain in a category."""
    return await list_entities(http, EntityKind.DOMAINS, validate_category(category))


async def get_all_urls(http: AsyncHttpClient, category: Category | str) -> list[str]:
    """List every URL in a category."""
    return await list_entities(http, EntityKind.URLS, validate_category(category))


async def get_domain(http: AsyncHttpClient, domain: str) -> Domain:
    """Get a single domain without authenticating."""
    validate_identifier(domain, EntityKind.DOMAINS)
    return await get_entity(http, EntityKind.DOMAINS, domain)


async def get_url(http: AsyncHttpClient, url: str) -> Url:
    """Get a single URL without authenticating."""
    validate_identifier(url, EntityKind.URLS)
    return await get_entity(http, EntityKind.URLS, url)
