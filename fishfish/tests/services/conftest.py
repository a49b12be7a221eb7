import pytest

from fishfish.api.http_client import AsyncHttpClient
from fishfish.config import FishFishConfig
from fishfish.core.cache import EntityCache
from fishfish.models.auth import Permission
from fishfish.models.entities import EntityKind
from fishfish.services.entity_service import EntityService


@pytest.fixture
def make_service(http: AsyncHttpClient, cache: EntityCache, make_token_manager):
    """Build an EntityService whose tokens carry the given permissions."""

    def _make(
        kind: EntityKind,
        *permissions: Permission,
        config: FishFishConfig | None = None,
    ) -> EntityService:
        manager = make_token_manager(*(permissions or (Permission.DOMAINS, Permission.URLS)))
        return EntityService(http, manager, cache, kind, config or FishFishConfig())

    return _make
