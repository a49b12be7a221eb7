import pytest

from fishfish.client import FishFishClient
from fishfish.models.entities import Category, EntityKind


@pytest.mark.integration
@pytest.mark.asyncio
async def test_status_and_listing(api_key: str) -> None:
    async with FishFishClient(api_key) as client:
        status = await client.get_status()
        names = await client.get_all_domains(Category.PHISHING)

        assert status.domains > 0
        assert len(names) > 0
        assert client.cache.size(EntityKind.DOMAINS) >= len(set(names))


@pytest.mark.integration
@pytest.mark.asyncio
async def test_session_token_exchange(api_key: str) -> None:
    async with FishFishClient(api_key) as client:
        token = await client.tokens.acquire()

        assert client.has_session_token is True
        assert not token.is_expired()
