"""
FishFish exception hierarchy.

All exceptions inherit from FishFishError for easy catching.
"""

from typing import Any

from fishfish.models.auth import CredentialKind, Permission


class FishFishError(Exception):
    """Base exception for all fishfish errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class InvalidInputError(FishFishError):
    """An argument has the wrong type or shape. Raised before any request is sent."""


class CacheDisabledError(FishFishError):
    """The cache was accessed while caching is disabled."""

    def __init__(self, message: str = "Cannot get cache because it's explicitly disabled") -> None:
        super().__init__(message)


class AuthenticationError(FishFishError):
    """Authentication or authorization failed."""


class UnauthorizedError(AuthenticationError):
    """The service rejected the API key or the session token (HTTP 401)."""

    code = 401

    def __init__(
        self,
        message: str | None = None,
        *,
        credential: CredentialKind,
        endpoint: str | None = None,
    ) -> None:
        if message is None:
            if credential is CredentialKind.SESSION_TOKEN:
                message = "The session token provided is invalid or has expired"
            else:
                message = "The API key provided is invalid or lacks the required permissions"
        super().__init__(message, credential=credential.value, endpoint=endpoint)
        self.credential = credential
        self.endpoint = endpoint


class ForbiddenError(AuthenticationError):
    """The session token was not issued with the permission an operation needs."""

    def __init__(self, permission: Permission, message: str | None = None) -> None:
        super().__init__(
            message or "The session token lacks the permission required for this action",
            permission=permission.value,
        )
        self.permission = permission


class APIError(FishFishError):
    """API request failed."""

    def __init__(self, message: str, *, code: int, endpoint: str | None = None) -> None:
        super().__init__(message, code=code, endpoint=endpoint)
        self.code = code
        self.endpoint = endpoint


class RateLimitError(APIError):
    """Rate limited by the API (HTTP 429)."""

    def __init__(
        self,
        message: str = "You are being rate limited",
        *,
        retry_after: float | None = None,
        endpoint: str | None = None,
    ) -> None:
        super().__init__(message, code=429, endpoint=endpoint)
        self.retry_after = retry_after


class UnexpectedStatusError(APIError):
    """The API answered with a status code outside of 2xx."""

    def __init__(self, code: int, body: str, *, endpoint: str | None = None) -> None:
        super().__init__(f"Unexpected status code {code}: {body}", code=code, endpoint=endpoint)
        self.body = body
