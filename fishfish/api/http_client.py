"""
Async HTTP client for the FishFish API.

Wraps an httpx client bound to the API base URL and maps response status codes
onto the fishfish exception hierarchy.
"""

import asyncio
from typing import Any

import httpx
import structlog

from fishfish.config import FishFishConfig
from fishfish.exceptions import (
    APIError,
    RateLimitError,
    UnauthorizedError,
    UnexpectedStatusError,
)
from fishfish.models.auth import CredentialKind

logger = structlog.get_logger(__name__)

SENSITIVE_KEYS = frozenset(
    {
        "Authorization",
        "authorization",
        "apiKey",
        "api_key",
        "token",
        "value",
    }
)


def sanitize_for_log(data: dict[str, Any]) -> dict[str, Any]:
    """
    Remove sensitive fields from a dict before logging.

    Recursively sanitizes nested dictionaries and lists.

    Args:
        data: Dictionary that may contain sensitive values.

    Returns:
        Copy with sensitive values replaced by "***".
    """
    result = {}
    for key, value in data.items():
        if key in SENSITIVE_KEYS:
            result[key] = "***"
        elif isinstance(value, dict):
            result[key] = sanitize_for_log(value)
        elif isinstance(value, list):
            result[key] = [
                sanitize_for_log(item) if isinstance(item, dict) else item for item in value
            ]
        else:
            result[key] = value
    return result


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def validate_response(
    response: httpx.Response,
    *,
    has_session_token: bool = False,
    endpoint: str | None = None,
) -> None:
    """
    Raise the matching error for a non-2xx response.

    Args:
        response: Response to check.
        has_session_token: Whether this request carried a session token. A 401 is
            blamed on the session token only then, and on the API key otherwise,
            even when a token is held elsewhere: an anonymous request rejected
            with 401 reports the API key.
        endpoint: Endpoint for error context.

    Raises:
        UnauthorizedError: On 401.
        RateLimitError: On 429.
        UnexpectedStatusError: On any other status outside 200-299.
    """
    status = response.status_code

    if status == httpx.codes.UNAUTHORIZED:
        credential = CredentialKind.SESSION_TOKEN if has_session_token else CredentialKind.API_KEY
        raise UnauthorizedError(credential=credential, endpoint=endpoint)

    if status == httpx.codes.TOO_MANY_REQUESTS:
        raise RateLimitError(retry_after=_retry_after(response), endpoint=endpoint)

    if status < 200 or status > 299:
        raise UnexpectedStatusError(status, response.text, endpoint=endpoint)


class AsyncHttpClient:
    """Async HTTP client for the FishFish API."""

    def __init__(
        self,
        config: FishFishConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            config: Client configuration.
            transport: Optional transport for testing (mock transport).
        """
        self._config = config
        self._transport = transport

        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def __aenter__(self) -> "AsyncHttpClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self._close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self._config.api_url,
                    timeout=self._config.timeout,
                    transport=self._transport,
                    headers={
                        "Accept": "application/json",
                        "User-Agent": self._config.user_agent,
                    },
                )
        return self._client

    async def _close(self) -> None:
        async with self._client_lock:
            if self._client is None:
                logger.debug("Client not open.")
                return
            await self._client.aclose()
            self._client = None

    @property
    def is_open(self) -> bool:
        return self._client is not None

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        api_key: str | None = None,
        session_token: str | None = None,
    ) -> Any:
        """
        Make an API request.

        The Authorization header carries the raw credential, without scheme.

        Args:
            method: HTTP method (GET, POST, etc.).
            endpoint: API endpoint (e.g., "/domains/example.com").
            json: JSON body for POST/PATCH requests.
            params: Query parameters.
            api_key: Authenticate with the API key (token exchange only).
            session_token: Authenticate with a session token.

        Returns:
            Decoded JSON body, or None for an empty body.

        Raises:
            UnauthorizedError: On 401.
            RateLimitError: On 429.
            UnexpectedStatusError: On any other non-2xx status.
            APIError: If a 2xx body is not valid JSON.
            httpx.HTTPError: If the request fails due to network issues.
        """
        headers = {}
        if session_token is not None:
            headers["Authorization"] = session_token
        elif api_key is not None:
            headers["Authorization"] = api_key

        if self._client is None:
            msg = "HTTP client not initialized. Use 'async with' first."
            raise RuntimeError(msg)

        logger.debug("API request", method=method, endpoint=endpoint)
        response = await self._client.request(
            method=method,
            url=endpoint,
            json=json,
            params=params,
            headers=headers,
        )

        validate_response(
            response,
            has_session_token=session_token is not None,
            endpoint=endpoint,
        )

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise APIError(
                "Invalid JSON response from API",
                code=response.status_code,
                endpoint=endpoint,
            ) from e
