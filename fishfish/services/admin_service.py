"""
Administrative operations on users and their main tokens.
"""

from collections.abc import Iterable
from typing import Any

import structlog

from fishfish.api.endpoints import users
from fishfish.api.http_client import AsyncHttpClient
from fishfish.exceptions import ForbiddenError, InvalidInputError
from fishfish.models.auth import Permission
from fishfish.services.token_manager import TokenManager

logger = structlog.get_logger(__name__)


class AdminService:
    """
    User management. Every call needs a session token issued with
    ``Permission.ADMIN``; payloads are returned as sent by the API.
    """

    def __init__(self, http_client: AsyncHttpClient, token_manager: TokenManager) -> None:
        self._http = http_client
        self._tokens = token_manager

    async def _admin_token(self) -> str:
        token = await self._tokens.acquire()
        if not token.has_permission(Permission.ADMIN):
            raise ForbiddenError(Permission.ADMIN)
        return token.value

    @staticmethod
    def _require_id(value: Any, name: str) -> str:
        if not isinstance(value, str) or len(value) == 0:
            msg = f"{name} must be a non-empty string"
            raise InvalidInputError(msg)
        return value

    async def get_user(self, user_id: str) -> dict[str, Any]:
        self._require_id(user_id, "user_id")
        return await users.get_user(self._http, user_id, session_token=await self._admin_token())

    async def create_user(self) -> dict[str, Any]:
        user = await users.create_user(self._http, session_token=await self._admin_token())
        logger.info("Created user")
        return user

    async def update_user(self, user_id: str, **fields: Any) -> dict[str, Any]:
        self._require_id(user_id, "user_id")
        return await users.update_user(
            self._http, user_id, fields, session_token=await self._admin_token()
        )

    async def delete_user(self, user_id: str) -> None:
        self._require_id(user_id, "user_id")
        await users.delete_user(self._http, user_id, session_token=await self._admin_token())
        logger.info("Deleted user", user_id=user_id)

    async def get_user_main_token(self, user_id: str, token_id: str) -> dict[str, Any]:
        self._require_id(user_id, "user_id")
        self._require_id(token_id, "token_id")
        return await users.get_main_token(
            self._http, user_id, token_id, session_token=await self._admin_token()
        )

    async def create_user_main_token(
        self, user_id: str, permissions: Iterable[Permission]
    ) -> dict[str, Any]:
        """
        Create a new main token (API key) for a user.

        Raises:
            InvalidInputError: If no permission is given.
        """
        self._require_id(user_id, "user_id")
        requested = [Permission(p) for p in permissions]
        if not requested:
            msg = "You need to provide at least one permission for the main token"
            raise InvalidInputError(msg)
        created = await users.create_main_token(
            self._http, user_id, requested, session_token=await self._admin_token()
        )
        logger.info("Created main token", user_id=user_id)
        return created

    async def delete_user_main_token(self, user_id: str, token_id: str) -> None:
        self._require_id(user_id, "user_id")
        self._require_id(token_id, "token_id")
        await users.delete_main_token(
            self._http, user_id, token_id, session_token=await self._admin_token()
        )
        logger.info("Deleted main token", user_id=user_id)
