"""Legacy transport: per-user-identifier ``/auth/{platform}/...`` endpoints.

Kept for deployments that predate the session-based connections API.
Platforms whose descriptor says ``requires_user_id`` are addressed by an
explicit user id in the query string; globally-authenticated platforms
(TikTok) are listed through ``/api/auth/{platform}/users`` and may carry
several external accounts at once.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from socialflood.exceptions import Expired, NotFound, RemoteError, Unauthenticated
from socialflood.platforms.registry import descriptor
from socialflood.schemas.connection import (
    Connection,
    GlobalAccountsResponse,
    LegacyStatusResponse,
    split_legacy_connection_id,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from socialflood.platforms.base import Platform
    from socialflood.transport.http import ApiClient

logger = logging.getLogger(__name__)


def _require_user_id(platform: Platform, user_id: str | None) -> str:
    if not user_id:
        msg = f"A user id is required to reach {descriptor(platform).display_name}"
        raise Unauthenticated(msg)
    return user_id


class LegacyTransport:
    """Connection transport for the per-user-identifier API shape."""

    name: str = "legacy"

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def _status(self, platform: Platform, user_id: str) -> Connection | None:
        body = await self.api.request_model(
            "GET",
            f"/auth/{platform.value}/status",
            LegacyStatusResponse,
            params={"userId": user_id},
            fallback_message=f"Failed to get {platform.value} status",
        )
        return body.to_connection(platform, user_id)

    async def _global_accounts(self, platform: Platform) -> list[Connection]:
        body = await self.api.request_model(
            "GET",
            f"/api/auth/{platform.value}/users",
            GlobalAccountsResponse,
            fallback_message="Failed to fetch users",
        )
        return [account.to_connection(platform) for account in body.users]

    async def lookup(self, platform: Platform, user_id: str | None) -> list[Connection]:
        if not descriptor(platform).requires_user_id:
            return await self._global_accounts(platform)
        connection = await self._status(platform, _require_user_id(platform, user_id))
        return [connection] if connection is not None else []

    async def lookup_many(
        self, platforms: Sequence[Platform], user_id: str | None
    ) -> dict[Platform, list[Connection] | Exception]:
        results = await asyncio.gather(
            *(self.lookup(p, user_id) for p in platforms), return_exceptions=True
        )
        outcomes: dict[Platform, list[Connection] | Exception] = {}
        for platform, result in zip(platforms, results, strict=True):
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
            outcomes[platform] = result
        return outcomes

    def connect_url(self, platform: Platform, user_id: str | None) -> str:
        if not descriptor(platform).requires_user_id:
            return self.api.url(f"/auth/{platform.value}/login")
        return self.api.url(
            f"/auth/{platform.value}/login",
            params={"userId": _require_user_id(platform, user_id)},
        )

    def _split(self, connection_id: str) -> tuple[Platform, str]:
        parts = split_legacy_connection_id(connection_id)
        if parts is None:
            raise NotFound(f"Unknown connection: {connection_id}")
        return parts

    async def disconnect(self, connection_id: str) -> None:
        platform, user_id = self._split(connection_id)
        if not descriptor(platform).requires_user_id:
            msg = f"Disconnect is not supported for {descriptor(platform).display_name}"
            raise RemoteError(msg)
        await self.api.request(
            "DELETE",
            f"/auth/{platform.value}/{user_id}",
            fallback_message="Failed to disconnect",
        )
        logger.info("Disconnected %s for user %s", platform.value, user_id)

    async def details(self, connection_id: str) -> Connection:
        platform, user_id = self._split(connection_id)
        connection = await self._status(platform, user_id)
        if connection is None:
            raise NotFound(f"Unknown connection: {connection_id}")
        return connection

    async def refresh(self, connection_id: str) -> Connection:
        # The legacy API refreshes tokens server-side on status reads.
        platform, user_id = self._split(connection_id)
        connection = await self._status(platform, user_id)
        if connection is None:
            msg = f"{descriptor(platform).display_name} must be connected again"
            raise Expired(msg)
        return connection
