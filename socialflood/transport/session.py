"""Session (cookie) transport: the unified ``/api/connections`` endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from socialflood.schemas.connection import Connection, ConnectionsResponse

if TYPE_CHECKING:
    from collections.abc import Sequence

    from socialflood.platforms.base import Platform
    from socialflood.transport.http import ApiClient

logger = logging.getLogger(__name__)


class SessionTransport:
    """Connection transport backed by the authenticated session.

    The remote lists every connection of the session's user in one call, so
    all platforms of one refresh are answered from a single listing. Each
    refresh fetches its own listing. The user id is implied by the session
    cookie and ignored here.
    """

    name: str = "session"

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def list_connections(self) -> list[Connection]:
        """Fetch every connection of the current session user.

        Records for platforms this client does not know, or that fail
        validation, are logged and skipped so they cannot hide the rest.
        """
        body = await self.api.request_model(
            "GET",
            "/api/connections",
            ConnectionsResponse,
            fallback_message="Failed to get connections",
        )
        connections: list[Connection] = []
        for record in body.connections:
            try:
                connections.append(Connection.model_validate(record))
            except ValidationError as exc:
                logger.warning(
                    "Skipping unreadable connection %r (platform %r): %s",
                    record.get("id"),
                    record.get("platform"),
                    exc.errors()[0]["msg"],
                )
        return connections

    async def lookup(self, platform: Platform, user_id: str | None) -> list[Connection]:
        connections = await self.list_connections()
        return [c for c in connections if c.platform == platform]

    async def lookup_many(
        self, platforms: Sequence[Platform], user_id: str | None
    ) -> dict[Platform, list[Connection] | Exception]:
        connections = await self.list_connections()
        return {p: [c for c in connections if c.platform == p] for p in platforms}

    def connect_url(self, platform: Platform, user_id: str | None) -> str:
        return self.api.url(f"/api/connections/{platform.value}/connect")

    async def disconnect(self, connection_id: str) -> None:
        await self.api.request(
            "DELETE",
            f"/api/connections/{connection_id}",
            fallback_message="Failed to disconnect",
        )
        logger.info("Disconnected connection %s", connection_id)

    async def refresh(self, connection_id: str) -> Connection:
        return await self.api.request_model(
            "POST",
            f"/api/connections/{connection_id}/refresh",
            Connection,
            fallback_message="Failed to refresh connection",
        )

    async def details(self, connection_id: str) -> Connection:
        return await self.api.request_model(
            "GET",
            f"/api/connections/details/{connection_id}",
            Connection,
            fallback_message="Failed to get connection details",
        )
