"""
Authentication-related domain models.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum


class Permission(StrEnum):
    """Permissions a session token can be issued with."""

    ADMIN = "admin"
    DOMAINS = "domains"
    URLS = "urls"


class CredentialKind(StrEnum):
    """Which credential a request was authenticated with."""

    API_KEY = "api_key"
    SESSION_TOKEN = "session_token"


@dataclass(frozen=True, kw_only=True)
class SessionToken:
    """
    Short-lived credential obtained by exchanging the API key.

    Attributes:
        value: Token sent as the Authorization header.
        expires_at: When the service stops accepting the token.
        permissions: Permissions the token was issued with. Fixed for its lifetime.
    """

    value: str = field(repr=False)
    expires_at: datetime
    permissions: frozenset[Permission]

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the token is past its expiry."""
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    def seconds_until_expiry(self, now: datetime | None = None) -> float:
        now = now or datetime.now(timezone.utc)
        return (self.expires_at - now).total_seconds()

    def has_permission(self, permission: Permission) -> bool:
        return permission in self.permissions
