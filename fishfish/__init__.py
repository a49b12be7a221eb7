"""
FishFish Python Client.

An async Python client for the FishFish phishing and malware database, with
session token management, a local cache and an optional realtime feed.

Example:
    ```python
    from fishfish import Category, FishFishClient, FishFishConfig

    config = FishFishConfig(realtime=True, resync=True)

    async with FishFishClient("my-api-key", config) as client:
        # Cached after the first call, kept fresh by the realtime feed
        domain = await client.get_domain("example.com")
        print(domain.category)

        names = await client.get_all_domains(Category.PHISHING)
    ```
"""

from fishfish.client import FishFishClient
from fishfish.config import FishFishConfig
from fishfish.exceptions import (
    APIError,
    AuthenticationError,
    CacheDisabledError,
    FishFishError,
    ForbiddenError,
    InvalidInputError,
    RateLimitError,
    UnauthorizedError,
    UnexpectedStatusError,
)
from fishfish.models.auth import CredentialKind, Permission, SessionToken
from fishfish.models.entities import ApiStatus, Category, Domain, EntityKind, Url
from fishfish.models.events import EventKind, FeedEvent

__version__ = "0.1.0"

__all__ = [
    # Main client
    "FishFishClient",
    "FishFishConfig",
    # Models
    "ApiStatus",
    "Category",
    "CredentialKind",
    "Domain",
    "EntityKind",
    "EventKind",
    "FeedEvent",
    "Permission",
    "SessionToken",
    "Url",
    # Exceptions
    "FishFishError",
    "InvalidInputError",
    "CacheDisabledError",
    "AuthenticationError",
    "UnauthorizedError",
    "ForbiddenError",
    "APIError",
    "RateLimitError",
    "UnexpectedStatusError",
]
