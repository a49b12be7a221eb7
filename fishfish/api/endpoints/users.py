"""User and main token endpoints. All of them require an admin session token."""

from collections.abc import Iterable
from typing import Any

from fishfish.api.http_client import AsyncHttpClient
from fishfish.models.auth import Permission


async def get_user(http: AsyncHttpClient, user_id: str, *, session_token: str) -> dict[str, Any]:
    return await http.request("GET", f"/users/{user_id}", session_token=session_token)


async def create_user(http: AsyncHttpClient, *, session_token: str) -> dict[str, Any]:
    return await http.request("POST", "/users", session_token=session_token)


async def update_user(
    http: AsyncHttpClient,
    user_id: str,
    fields: dict[str, Any],
    *,
    session_token: str,
) -> dict[str, Any]:
    return await http.request(
        "PATCH", f"/users/{user_id}", json=fields or None, session_token=session_token
    )


async def delete_user(http: AsyncHttpClient, user_id: str, *, session_token: str) -> None:
    await http.request("DELETE", f"/users/{user_id}", session_token=session_token)


async def get_main_token(
    http: AsyncHttpClient, user_id: str, token_id: str, *, session_token: str
) -> dict[str, Any]:
    """Get a user's main token (without its secret)."""
    return await http.request(
        "GET", f"/users/{user_id}/tokens/{token_id}", session_token=session_token
    )


async def create_main_token(
    http: AsyncHttpClient,
    user_id: str,
    permissions: Iterable[Permission],
    *,
    session_token: str,
) -> dict[str, Any]:
    """Create a main token (API key) for a user."""
    return await http.request(
        "POST",
        f"/users/{user_id}/tokens",
        json={"permissions": [str(p) for p in permissions]},
        session_token=session_token,
    )


async def delete_main_token(
    http: AsyncHttpClient, user_id: str, token_id: str, *, session_token: str
) -> None:
    await http.request(
        "DELETE", f"/users/{user_id}/tokens/{token_id}", session_token=session_token
    )
