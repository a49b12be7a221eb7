"""
Realtime feed event models.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from fishfish.models.entities import EntityKind


class EventAction(StrEnum):
    """What happened to an entry."""

    CREATE = "create"
    DELETE = "delete"
    UPDATE = "update"


class EventKind(StrEnum):
    """Event types sent over the WebSocket feed."""

    DOMAIN_CREATE = "domain_create"
    DOMAIN_DELETE = "domain_delete"
    DOMAIN_UPDATE = "domain_update"
    URL_CREATE = "url_create"
    URL_DELETE = "url_delete"
    URL_UPDATE = "url_update"

    @property
    def entity(self) -> EntityKind:
        return EntityKind.DOMAINS if self.value.startswith("domain_") else EntityKind.URLS

    @property
    def action(self) -> EventAction:
        return EventAction(self.value.split("_", 1)[1])


@dataclass(frozen=True, kw_only=True)
class FeedEvent:
    """
    A change event received from the feed, after timestamp conversion.

    Attributes:
        kind: The event type.
        identifier: Domain name or URL the event is about.
        fields: Record fields carried by the event (identifier included).
    """

    kind: EventKind
    identifier: str
    fields: dict[str, Any]
