"""
Session token lifecycle.

Exchanges the API key for short-lived session tokens, makes concurrent callers
share a single exchange, and drops the token when it expires.
"""

import asyncio
from collections.abc import Iterable
from datetime import datetime, timezone

import structlog

from fishfish.api.endpoints.tokens import create_session_token
from fishfish.api.http_client import AsyncHttpClient
from fishfish.exceptions import InvalidInputError
from fishfish.models.auth import Permission, SessionToken

logger = structlog.get_logger(__name__)


class TokenManager:
    """
    Owns the API key and the session token derived from it.

    At most one token is held at a time. While it is valid, ``acquire`` returns it
    without a request, whatever permissions are asked for. When no valid token is
    held, the first caller starts the exchange and every caller arriving before it
    completes awaits that same exchange. Its failure is raised to all of them.

    Concurrency:
    - The in-flight exchange is stored before the first suspension point, so two
      callers on the same event loop can never start two exchanges.
    - A waiter being cancelled does not cancel the shared exchange.
    """

    def __init__(
        self,
        http_client: AsyncHttpClient,
        api_key: str,
        default_permissions: Iterable[Permission],
    ) -> None:
        """
        Args:
            http_client: HTTP client for API requests.
            api_key: Long-lived API key. Never logged.
            default_permissions: Permissions requested when ``acquire`` gets none.

        Raises:
            InvalidInputError: If the API key is not a non-empty string or no
                default permission is given.
        """
        if not isinstance(api_key, str) or len(api_key) == 0:
            msg = f"Expected a non-empty API key string but received: {type(api_key).__name__}"
            raise InvalidInputError(msg)

        permissions = frozenset(Permission(p) for p in default_permissions)
        if len(permissions) == 0:
            msg = "You need to provide at least one permission for the session token"
            raise InvalidInputError(msg)

        self._http = http_client
        self._api_key = api_key
        self._default_permissions = permissions

        self._token: SessionToken | None = None
        self._pending: asyncio.Task[SessionToken] | None = None
        self._expiry_handle: asyncio.TimerHandle | None = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(has_valid_token={self.has_valid_token})"

    @property
    def default_permissions(self) -> frozenset[Permission]:
        return self._default_permissions

    @property
    def token(self) -> SessionToken | None:
        """The held token, or None if there is none or it has expired."""
        if self._token is not None and self._token.is_expired():
            self._discard()
        return self._token

    @property
    def has_valid_token(self) -> bool:
        """Check if a token is held and not yet expired."""
        return self.token is not None

    @property
    def is_acquiring(self) -> bool:
        """Check if a token exchange is in flight."""
        return self._pending is not None

    def check_permission(self, permission: Permission) -> bool:
        """Check if the held token was issued with ``permission``."""
        token = self.token
        return token is not None and token.has_permission(permission)

    async def acquire(self, permissions: Iterable[Permission] | None = None) -> SessionToken:
        """
        Return a valid session token, exchanging the API key if needed.

        Args:
            permissions: Permissions for a new token. Ignored when a token is
                already held or an exchange is in flight.

        Returns:
            The session token.

        Raises:
            UnauthorizedError: If the API key is rejected.
            RateLimitError: If rate limited.
            UnexpectedStatusError: On any other non-2xx status.
        """
        token = self.token
        if token is not None:
            return token

        if self._pending is None:
            requested = (
                frozenset(Permission(p) for p in permissions)
                if permissions is not None
                else self._default_permissions
            )
            self._pending = asyncio.create_task(self._exchange(requested))
        else:
            logger.debug("Joining in-flight token exchange")

        return await asyncio.shield(self._pending)

    async def _exchange(self, permissions: frozenset[Permission]) -> SessionToken:
        try:
            logger.debug("Exchanging API key for session token", permissions=sorted(permissions))
            response = await create_session_token(self._http, self._api_key, sorted(permissions))

            token = SessionToken(
                value=response["token"],
                expires_at=datetime.fromtimestamp(response["expires"], tz=timezone.utc),
                permissions=permissions,
            )
            self._token = token
            self._arm_expiry(token)

            logger.info(
                "Session token acquired",
                expires_at=token.expires_at.isoformat(),
                permissions=sorted(permissions),
            )
            return token
        finally:
            if self._pending is asyncio.current_task():
                self._pending = None

    def _arm_expiry(self, token: SessionToken) -> None:
        if self._expiry_handle is not None:
            self._expiry_handle.cancel()
        delay = max(token.seconds_until_expiry(), 0.0)
        self._expiry_handle = asyncio.get_running_loop().call_later(delay, self._expire)

    def _expire(self) -> None:
        self._expiry_handle = None
        if self._token is not None:
            logger.debug("Session token expired")
        self._token = None

    def _discard(self) -> None:
        if self._expiry_handle is not None:
            self._expiry_handle.cancel()
            self._expiry_handle = None
        self._token = None

    def close(self) -> None:
        """Drop the token and cancel the expiry timer and any in-flight exchange."""
        self._discard()
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
