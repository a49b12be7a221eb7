"""Domain and URL endpoints."""

from typing import Any
from urllib.parse import quote

from fishfish.api.http_client import AsyncHttpClient
from fishfish.exceptions import APIError
from fishfish.models.entities import Category, EntityKind, Record

# Characters encodeURI leaves alone, minus "?" and "#" which would end the path
_URL_SAFE = ";,/:@&=+$-_.!~*'()"


def entity_endpoint(kind: EntityKind, identifier: str) -> str:
    """Build the single-entity endpoint, percent-encoding the identifier."""
    safe = _URL_SAFE if kind is EntityKind.URLS else ""
    return f"{kind.path}/{quote(identifier, safe=safe)}"


def _parse_record(kind: EntityKind, data: Any, endpoint: str) -> Record:
    if not isinstance(data, dict) or kind.record_type.identifier_field not in data:
        msg = f"Malformed {kind.value} record"
        raise APIError(msg, code=200, endpoint=endpoint)
    try:
        return kind.record_type.from_api(data)
    except ValueError as e:
        msg = f"Malformed {kind.value} record: {e}"
        raise APIError(msg, code=200, endpoint=endpoint) from e


async def get_entity(
    http: AsyncHttpClient,
    kind: EntityKind,
    identifier: str,
    *,
    session_token: str | None = None,
) -> Record:
    """
    Get a single domain or URL.

    Args:
        http: Configured async HTTP client.
        kind: Domains or URLs.
        identifier: Domain name or URL.
        session_token: Optional token. The endpoint is public.

    Returns:
        The full record.
    """
    endpoint = entity_endpoint(kind, identifier)
    response = await http.request("GET", endpoint, session_token=session_token)
    return _parse_record(kind, response, endpoint)


async def list_entities(
    http: AsyncHttpClient,
    kind: EntityKind,
    category: Category,
    *,
    full: bool = False,
    session_token: str | None = None,
) -> list[Record] | list[str]:
    """
    List every domain or URL of a category.

    Args:
        http: Configured async HTTP client.
        kind: Domains or URLs.
        category: Category to filter by.
        full: Return full records instead of identifiers. Requires a token.
        session_token: Token for full listings.

    Returns:
        Records when ``full`` is set, identifiers otherwise.
    """
    response = await http.request(
        "GET",
        kind.path,
        params={"category": str(category), "full": "true" if full else "false"},
        session_token=session_token,
    )
    items = response or []

    if not full:
        return [str(item) for item in items]
    return [_parse_record(kind, item, kind.path) for item in items]


async def create_entity(
    http: AsyncHttpClient,
    kind: EntityKind,
    identifier: str,
    body: dict[str, Any],
    *,
    session_token: str,
) -> Record:
    """Insert a new domain or URL."""
    endpoint = entity_endpoint(kind, identifier)
    response = await http.request("POST", endpoint, json=body, session_token=session_token)
    return _parse_record(kind, response, endpoint)


async def update_entity(
    http: AsyncHttpClient,
    kind: EntityKind,
    identifier: str,
    body: dict[str, Any],
    *,
    session_token: str,
) -> Record:
    """Patch an existing domain or URL."""
    endpoint = entity_endpoint(kind, identifier)
    response = await http.request("PATCH", endpoint, json=body, session_token=session_token)
    return _parse_record(kind, response, endpoint)


async def delete_entity(
    http: AsyncHttpClient,
    kind: EntityKind,
    identifier: str,
    *,
    session_token: str,
) -> None:
    """Delete a domain or URL."""
    await http.request(
        "DELETE", entity_endpoint(kind, identifier), session_token=session_token
    )
