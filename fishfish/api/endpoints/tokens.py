"""Session token endpoints."""

from collections.abc import Iterable
from typing import Any

import structlog

from fishfish.api.http_client import AsyncHttpClient, sanitize_for_log
from fishfish.exceptions import APIError
from fishfish.models.auth import Permission

logger = structlog.get_logger(__name__)

TOKENS_ENDPOINT = "/users/@me/tokens"


async def create_session_token(
    http: AsyncHttpClient,
    api_key: str,
    permissions: Iterable[Permission],
) -> dict[str, Any]:
    """
    Exchange the API key for a session token.

    Args:
        http: Configured async HTTP client.
        api_key: Long-lived API key.
        permissions: Permissions to request for the token.

    Returns:
        Response with ``token`` and ``expires`` (unix seconds).

    Raises:
        UnauthorizedError: If the API key is rejected.
        APIError: If the response lacks the token fields.
    """
    response = await http.request(
        "POST",
        TOKENS_ENDPOINT,
        json={"permissions": [str(p) for p in permissions]},
        api_key=api_key,
    )

    if not isinstance(response, dict) or "token" not in response or "expires" not in response:
        msg = "Malformed session token response"
        raise APIError(msg, code=200, endpoint=TOKENS_ENDPOINT)

    logger.debug("Session token created", **sanitize_for_log(response))
    return response
