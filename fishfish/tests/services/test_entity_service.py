"""Tests for EntityService."""

import json

import pytest

from fishfish.config import FishFishConfig
from fishfish.core.cache import EntityCache
from fishfish.exceptions import ForbiddenError, InvalidInputError, UnexpectedStatusError
from fishfish.models.auth import Permission
from fishfish.models.entities import Category, Domain, EntityKind, Url
from fishfish.tests.fakes import SESSION_TOKEN, MockTransport, domain_payload, token_payload, url_payload

TOKENS = "/users/@me/tokens"
DOMAIN = "login-paypal.example.com"
URL = "https://steam-gift.example.com/claim"

# Get tests


@pytest.mark.asyncio
async def test_get_fetches_and_caches(
    make_service, mock_transport: MockTransport, cache: EntityCache
) -> None:
    service = make_service(EntityKind.DOMAINS)
    mock_transport.add_response("POST", TOKENS, json_data=token_payload())
    mock_transport.add_response("GET", f"/domains/{DOMAIN}", json_data=domain_payload())

    first = await service.get(DOMAIN)
    second = await service.get(DOMAIN)

    assert first == second
    assert cache.get(EntityKind.DOMAINS, DOMAIN) == first
    assert len(mock_transport.requests_to("GET", f"/domains/{DOMAIN}")) == 1
    assert mock_transport.requests_to("GET", f"/domains/{DOMAIN}")[0].headers["Authorization"] == SESSION_TOKEN


@pytest.mark.asyncio
async def test_get_force_refetches(make_service, mock_transport: MockTransport) -> None:
    service = make_service(EntityKind.DOMAINS)
    mock_transport.add_response("POST", TOKENS, json_data=token_payload())
    mock_transport.add_response("GET", f"/domains/{DOMAIN}", json_data=domain_payload())
    mock_transport.add_response(
        "GET", f"/domains/{DOMAIN}", json_data=domain_payload(category="safe")
    )

    await service.get(DOMAIN)
    refreshed = await service.get(DOMAIN, force=True)

    assert refreshed.category is Category.SAFE
    assert len(mock_transport.requests_to("GET", f"/domains/{DOMAIN}")) == 2


@pytest.mark.asyncio
async def test_get_without_cache_flag_does_not_store(
    make_service, mock_transport: MockTransport, cache: EntityCache
) -> None:
    service = make_service(EntityKind.URLS)
    mock_transport.add_response("POST", TOKENS, json_data=token_payload())
    mock_transport.add_response("GET", f"/urls/{URL}", json_data=url_payload())

    record = await service.get(URL, cache=False)

    assert isinstance(record, Url)
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_get_with_cache_disabled_always_fetches(
    make_service, mock_transport: MockTransport, cache: EntityCache
) -> None:
    service = make_service(EntityKind.DOMAINS, config=FishFishConfig(cache=False))
    mock_transport.add_response("POST", TOKENS, json_data=token_payload())
    mock_transport.add_response("GET", f"/domains/{DOMAIN}", json_data=domain_payload(), repeat=True)

    await service.get(DOMAIN)
    await service.get(DOMAIN)

    assert len(mock_transport.requests_to("GET", f"/domains/{DOMAIN}")) == 2
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_get_not_found_raises_unexpected_status(
    make_service, mock_transport: MockTransport
) -> None:
    service = make_service(EntityKind.DOMAINS)
    mock_transport.add_response("POST", TOKENS, json_data=token_payload())
    mock_transport.add_response("GET", "/domains/unknown.example.com", status_code=404, content=b"not found")

    with pytest.raises(UnexpectedStatusError) as exc_info:
        await service.get("unknown.example.com")

    assert exc_info.value.code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("identifier", ["", None, 12])
async def test_invalid_identifier_rejected_before_io(
    make_service, mock_transport: MockTransport, identifier: object
) -> None:
    service = make_service(EntityKind.DOMAINS)

    with pytest.raises(InvalidInputError):
        await service.get(identifier)  # type: ignore[arg-type]

    assert mock_transport.requests == []


# Listing tests


@pytest.mark.asyncio
async def test_partial_listing_is_anonymous_and_cached(
    make_service, mock_transport: MockTransport, cache: EntityCache
) -> None:
    service = make_service(EntityKind.DOMAINS)
    mock_transport.add_response("GET", "/domains", json_data=["a.example.com", "b.example.com"])

    names = await service.get_all(Category.PHISHING)

    assert names == ["a.example.com", "b.example.com"]
    assert mock_transport.requests_to("POST", TOKENS) == []
    assert "Authorization" not in mock_transport.requests[0].headers
    assert cache.get(EntityKind.DOMAINS, "a.example.com") == Domain(domain="a.example.com")


@pytest.mark.asyncio
async def test_partial_listing_not_cached_when_disabled_by_policy(
    make_service, mock_transport: MockTransport, cache: EntityCache
) -> None:
    service = make_service(
        EntityKind.DOMAINS, config=FishFishConfig(do_not_cache_partial=True)
    )
    mock_transport.add_response("GET", "/domains", json_data=["a.example.com"])

    await service.get_all("phishing")

    assert len(cache) == 0


@pytest.mark.asyncio
async def test_partial_listing_keeps_complete_entries(
    make_service, mock_transport: MockTransport, cache: EntityCache
) -> None:
    service = make_service(EntityKind.DOMAINS)
    known = Domain.from_api(domain_payload("a.example.com"))
    cache.set(EntityKind.DOMAINS, known)
    mock_transport.add_response("GET", "/domains", json_data=["a.example.com"])

    await service.get_all(Category.PHISHING)

    assert cache.get(EntityKind.DOMAINS, "a.example.com") == known


@pytest.mark.asyncio
async def test_full_listing_caches_records(
    make_service, mock_transport: MockTransport, cache: EntityCache
) -> None:
    service = make_service(EntityKind.URLS)
    mock_transport.add_response("POST", TOKENS, json_data=token_payload())
    mock_transport.add_response("GET", "/urls", json_data=[url_payload()])

    records = await service.get_all(Category.MALWARE, full=True)

    assert records == [Url.from_api(url_payload())]
    assert cache.get(EntityKind.URLS, URL) == records[0]
    listing = mock_transport.requests_to("GET", "/urls")[0]
    assert listing.headers["Authorization"] == SESSION_TOKEN
    assert listing.url.params["full"] == "true"


@pytest.mark.asyncio
async def test_full_listing_needs_permission(
    make_service, mock_transport: MockTransport
) -> None:
    service = make_service(EntityKind.URLS, Permission.DOMAINS)
    mock_transport.add_response("POST", TOKENS, json_data=token_payload())

    with pytest.raises(ForbiddenError):
        await service.get_all(Category.MALWARE, full=True)

    assert mock_transport.requests_to("GET", "/urls") == []


@pytest.mark.asyncio
@pytest.mark.parametrize("category", [None, "scam"])
async def test_invalid_category_rejected(
    make_service, mock_transport: MockTransport, category: object
) -> None:
    service = make_service(EntityKind.DOMAINS)

    with pytest.raises(InvalidInputError):
        await service.get_all(category)  # type: ignore[arg-type]

    assert mock_transport.requests == []


# Permission gate tests


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("kind", "granted", "identifier"),
    [
        (EntityKind.URLS, Permission.DOMAINS, URL),
        (EntityKind.DOMAINS, Permission.URLS, DOMAIN),
    ],
)
async def test_mutations_forbidden_without_permission(
    make_service,
    mock_transport: MockTransport,
    kind: EntityKind,
    granted: Permission,
    identifier: str,
) -> None:
    """Test that only the token exchange is sent when the token lacks the permission."""
    service = make_service(kind, granted)
    mock_transport.add_response("POST", TOKENS, json_data=token_payload())

    with pytest.raises(ForbiddenError) as exc_info:
        await service.insert(identifier, category=Category.PHISHING, description="x")
    with pytest.raises(ForbiddenError):
        await service.patch(identifier, description="x")
    with pytest.raises(ForbiddenError):
        await service.delete(identifier)

    assert exc_info.value.permission is kind.permission
    assert len(mock_transport.requests) == 1
    assert mock_transport.requests[0].url.path == "/v1/users/@me/tokens"


# Mutation tests


@pytest.mark.asyncio
async def test_insert_posts_and_caches(
    make_service, mock_transport: MockTransport, cache: EntityCache
) -> None:
    service = make_service(EntityKind.DOMAINS, Permission.DOMAINS)
    mock_transport.add_response("POST", TOKENS, json_data=token_payload())
    mock_transport.add_response("POST", f"/domains/{DOMAIN}", json_data=domain_payload())

    record = await service.insert(
        DOMAIN, category=Category.PHISHING, description="Fake PayPal login page", target="paypal"
    )

    request = mock_transport.requests_to("POST", f"/domains/{DOMAIN}")[0]
    assert json.loads(request.content) == {
        "category": "phishing",
        "description": "Fake PayPal login page",
        "target": "paypal",
    }
    assert cache.get(EntityKind.DOMAINS, DOMAIN) == record


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs",
    [{"description": "x"}, {"category": Category.SAFE}, {}],
)
async def test_insert_requires_category_and_description(
    make_service, mock_transport: MockTransport, kwargs: dict
) -> None:
    service = make_service(EntityKind.DOMAINS)

    with pytest.raises(InvalidInputError):
        await service.insert(DOMAIN, **kwargs)

    assert mock_transport.requests == []


@pytest.mark.asyncio
async def test_patch_sends_only_given_fields(
    make_service, mock_transport: MockTransport, cache: EntityCache
) -> None:
    service = make_service(EntityKind.URLS, Permission.URLS)
    mock_transport.add_response("POST", TOKENS, json_data=token_payload())
    mock_transport.add_response("PATCH", f"/urls/{URL}", json_data=url_payload(category="safe"))

    record = await service.patch(URL, category="safe")

    request = mock_transport.requests_to("PATCH", f"/urls/{URL}")[0]
    assert json.loads(request.content) == {"category": "safe"}
    assert record.category is Category.SAFE
    assert cache.get(EntityKind.URLS, URL) == record


@pytest.mark.asyncio
async def test_patch_without_fields_rejected(make_service, mock_transport: MockTransport) -> None:
    service = make_service(EntityKind.URLS)

    with pytest.raises(InvalidInputError):
        await service.patch(URL)

    assert mock_transport.requests == []


@pytest.mark.asyncio
async def test_delete_removes_cached_entry(
    make_service, mock_transport: MockTransport, cache: EntityCache
) -> None:
    service = make_service(EntityKind.DOMAINS, Permission.DOMAINS)
    cache.set(EntityKind.DOMAINS, Domain.from_api(domain_payload()))
    mock_transport.add_response("POST", TOKENS, json_data=token_payload())
    mock_transport.add_response("DELETE", f"/domains/{DOMAIN}", status_code=204)

    assert await service.delete(DOMAIN) is True
    assert cache.get(EntityKind.DOMAINS, DOMAIN) is None


@pytest.mark.asyncio
async def test_get_returns_partial_entry_until_forced(
    make_service, mock_transport: MockTransport
) -> None:
    service = make_service(EntityKind.DOMAINS)
    mock_transport.add_response("GET", "/domains", json_data=[DOMAIN])
    mock_transport.add_response("POST", TOKENS, json_data=token_payload())
    mock_transport.add_response("GET", f"/domains/{DOMAIN}", json_data=domain_payload())

    await service.get_all(Category.PHISHING)
    cached = await service.get(DOMAIN)

    assert cached.is_partial is True
    assert mock_transport.requests_to("GET", f"/domains/{DOMAIN}") == []

    full = await service.get(DOMAIN, force=True)

    assert full.is_partial is False
    assert await service.get(DOMAIN) == full
