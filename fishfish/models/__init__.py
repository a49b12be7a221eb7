"""
Domain models for FishFish.

These are immutable (frozen) dataclasses representing the core domain concepts.
"""

from fishfish.models.auth import CredentialKind, Permission, SessionToken
from fishfish.models.entities import (
    ApiStatus,
    Category,
    Domain,
    EntityKind,
    Record,
    Url,
)
from fishfish.models.events import EventAction, EventKind, FeedEvent

__all__ = [
    # Auth
    "CredentialKind",
    "Permission",
    "SessionToken",
    # Entities
    "ApiStatus",
    "Category",
    "Domain",
    "EntityKind",
    "Record",
    "Url",
    # Events
    "EventAction",
    "EventKind",
    "FeedEvent",
]
