"""
Domain and URL records published by the FishFish API.
"""

from dataclasses import dataclass, fields, replace
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, ClassVar, Self

from fishfish.models.auth import Permission


class Category(StrEnum):
    """Categories an entry can be flagged with."""

    MALWARE = "malware"
    PHISHING = "phishing"
    SAFE = "safe"


def parse_timestamp(value: Any) -> datetime | None:
    """
    Convert a unix timestamp in seconds to an aware datetime.

    Raises:
        ValueError: If the value is not a number or is out of range.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"Expected a unix timestamp but received: {type(value).__name__}"
        raise ValueError(msg)
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError) as e:
        msg = f"Timestamp out of range: {value!r}"
        raise ValueError(msg) from e


def parse_category(value: Any) -> Category | str | None:
    """Map a raw category to Category, keeping unknown values as plain strings."""
    if value is None:
        return None
    try:
        return Category(value)
    except ValueError:
        return value


@dataclass(frozen=True, kw_only=True)
class Record:
    """
    Fields shared by domains and URLs.

    Only the identifier is guaranteed: records built from non-full listings, or
    from update events that arrived before their create, hold nothing else.
    """

    identifier_field: ClassVar[str]

    category: Category | str | None = None
    description: str | None = None
    target: str | None = None
    added: datetime | None = None
    checked: datetime | None = None

    @property
    def identifier(self) -> str:
        return getattr(self, self.identifier_field)

    @property
    def is_partial(self) -> bool:
        """Check if only the identifier is known."""
        return all(
            getattr(self, f.name) is None for f in fields(self) if f.name != self.identifier_field
        )

    @classmethod
    def parse_fields(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Extract the known fields present in a raw API payload.

        Absent keys are left out so the result can be merged over an existing record.
        Timestamps and categories are converted; unknown keys are dropped.

        Args:
            data: Raw JSON object from the API or the WebSocket feed.

        Returns:
            Keyword arguments accepted by the record class.

        Raises:
            ValueError: If a timestamp field holds something other than unix seconds.
        """
        known = {f.name for f in fields(cls)}
        parsed: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                continue
            if key in ("added", "checked"):
                value = parse_timestamp(value)
            elif key == "category":
                value = parse_category(value)
            parsed[key] = value
        return parsed

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Self:
        return cls(**cls.parse_fields(data))

    @classmethod
    def partial(cls, identifier: str) -> Self:
        return cls(**{cls.identifier_field: identifier})

    def merge(self, updates: dict[str, Any]) -> Self:
        """Return a copy with the given fields replaced."""
        return replace(self, **updates)


@dataclass(frozen=True, kw_only=True)
class Domain(Record):
    """A domain flagged by FishFish."""

    identifier_field: ClassVar[str] = "domain"

    domain: str


@dataclass(frozen=True, kw_only=True)
class Url(Record):
    """A URL flagged by FishFish."""

    identifier_field: ClassVar[str] = "url"

    url: str


class EntityKind(StrEnum):
    """The two kinds of entries the API exposes."""

    DOMAINS = "domains"
    URLS = "urls"

    @property
    def path(self) -> str:
        return f"/{self.value}"

    @property
    def permission(self) -> Permission:
        return Permission.DOMAINS if self is EntityKind.DOMAINS else Permission.URLS

    @property
    def record_type(self) -> type[Record]:
        return Domain if self is EntityKind.DOMAINS else Url


@dataclass(frozen=True, kw_only=True)
class ApiStatus:
    """
    Status and metrics of the API.

    Attributes:
        domains: Number of domains in the database.
        urls: Number of URLs in the database.
        requests: Number of requests served.
        uptime: Uptime of the API in seconds.
        worker: Identifier of the worker that answered.
    """

    domains: int
    urls: int
    requests: int
    uptime: int
    worker: int
