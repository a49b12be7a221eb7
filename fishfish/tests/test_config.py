import pytest

from fishfish.config import FishFishConfig
from fishfish.models.auth import Permission


def test_defaults() -> None:
    config = FishFishConfig()

    assert config.api_url == "https://api.fishfish.gg/v1"
    assert config.default_permissions == frozenset({Permission.DOMAINS, Permission.URLS})
    assert config.cache is True
    assert config.do_not_cache_partial is False
    assert config.realtime is False
    assert config.reconnect_max_delay == 600.0


def test_permissions_given_as_strings_are_coerced() -> None:
    config = FishFishConfig(default_permissions=frozenset({"admin", "domains"}))

    assert config.default_permissions == frozenset({Permission.ADMIN, Permission.DOMAINS})


@pytest.mark.parametrize(
    "kwargs",
    [
        {"timeout": 0},
        {"default_permissions": frozenset()},
        {"resync_interval": -1},
        {"reconnect_max_delay": 0},
        {"identity": ""},
    ],
)
def test_invalid_values_rejected(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        FishFishConfig(**kwargs)


def test_unknown_permission_rejected() -> None:
    with pytest.raises(ValueError):
        FishFishConfig(default_permissions=frozenset({"superuser"}))
