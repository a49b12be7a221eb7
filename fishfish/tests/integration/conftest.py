import os

import pytest

from fishfish.client import API_KEY_ENV_VAR


def pytest_collection_modifyitems(config: pytest.Config, items: list) -> None:
    if os.getenv(API_KEY_ENV_VAR):
        return
    mark_expr = getattr(config.option, "markexpr", "")
    if "integration" in mark_expr:
        return
    skip = pytest.mark.skip(reason=f"{API_KEY_ENV_VAR} not set")
    for item in items:
        if item.get_closest_marker("integration"):
            item.add_marker(skip)


@pytest.fixture(scope="session")
def api_key() -> str:
    key = os.getenv(API_KEY_ENV_VAR)
    if not key:
        pytest.fail(f"{API_KEY_ENV_VAR} must be set to run integration tests.")
    return key
