from collections.abc import AsyncIterator, Iterator

import pytest
import pytest_asyncio

from fishfish.api.http_client import AsyncHttpClient
from fishfish.config import FishFishConfig
from fishfish.core.cache import EntityCache
from fishfish.models.auth import Permission
from fishfish.services.token_manager import TokenManager
from fishfish.tests.fakes import API_KEY, FakeSocketTransport, MockTransport


@pytest.fixture
def config() -> FishFishConfig:
    return FishFishConfig()


@pytest.fixture
def mock_transport() -> MockTransport:
    return MockTransport()


@pytest.fixture
def socket_transport() -> FakeSocketTransport:
    return FakeSocketTransport()


@pytest.fixture
def cache() -> EntityCache:
    return EntityCache()


@pytest_asyncio.fixture
async def http(config: FishFishConfig, mock_transport: MockTransport) -> AsyncIterator[AsyncHttpClient]:
    async with AsyncHttpClient(config, transport=mock_transport) as client:
        yield client


@pytest.fixture
def token_manager(http: AsyncHttpClient, config: FishFishConfig) -> Iterator[TokenManager]:
    manager = TokenManager(http, API_KEY, config.default_permissions)
    yield manager
    manager.close()


@pytest.fixture
def make_token_manager(http: AsyncHttpClient) -> Iterator:
    created: list[TokenManager] = []

    def _make(*permissions: Permission) -> TokenManager:
        manager = TokenManager(http, API_KEY, permissions)
        created.append(manager)
        return manager

    yield _make

    for manager in created:
        manager.close()
