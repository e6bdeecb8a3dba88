"""Connection status aggregation across platforms.

Each refresh asks the transport once for all of its platforms and gets one
outcome per platform back, so one platform failing never hides the
others. Refreshes are tagged with a monotonically increasing token and a
platform's snapshot is only replaced by the most recently *started* refresh
that covers it. A slow, superseded response never overwrites newer state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from socialflood.exceptions import ErrorKind, SocialFloodError
from socialflood.platforms.registry import available_platforms

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from socialflood.platforms.base import Platform
    from socialflood.schemas.connection import Connection
    from socialflood.transport.base import ConnectionTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectionSnapshot:
    """Per-platform view of connection state as of one refresh."""

    platform: Platform
    connections: tuple[Connection, ...] = ()
    fetch_error: ErrorKind | None = None
    error_message: str | None = None

    @property
    def connection(self) -> Connection | None:
        """The active connection if there is one, else the first known one."""
        for conn in self.connections:
            if conn.is_active:
                return conn
        return self.connections[0] if self.connections else None

    @property
    def is_connected(self) -> bool:
        return any(conn.is_active for conn in self.connections)


class ConnectionStatusAggregator:
    """Owns the snapshot map and keeps it current on demand."""

    def __init__(self, transport: ConnectionTransport) -> None:
        self.transport = transport
        self._snapshots: Mapping[Platform, ConnectionSnapshot] = MappingProxyType({})
        self._token = 0
        self._started: dict[Platform, int] = {}
        self._last_request: tuple[tuple[Platform, ...], str | None] | None = None

    @property
    def snapshots(self) -> Mapping[Platform, ConnectionSnapshot]:
        """Read-only view of the latest snapshots."""
        return self._snapshots

    def snapshot(self, platform: Platform) -> ConnectionSnapshot | None:
        return self._snapshots.get(platform)

    def active_count(self) -> int:
        """Number of platforms with an active connection."""
        return sum(1 for snap in self._snapshots.values() if snap.is_connected)

    def active_connections(self) -> list[Connection]:
        """Every active connection, in snapshot order."""
        return [
            conn
            for snap in self._snapshots.values()
            for conn in snap.connections
            if conn.is_active
        ]

    def _snapshot(
        self, platform: Platform, outcome: list[Connection] | Exception
    ) -> ConnectionSnapshot:
        if isinstance(outcome, SocialFloodError):
            logger.warning("Status lookup for %s failed: %s", platform.value, outcome.message)
            return ConnectionSnapshot(
                platform=platform, fetch_error=outcome.kind, error_message=outcome.message
            )
        if isinstance(outcome, Exception):
            logger.error("Unexpected error looking up %s", platform.value, exc_info=outcome)
            return ConnectionSnapshot(
                platform=platform,
                fetch_error=ErrorKind.REMOTE_ERROR,
                error_message=str(outcome) or type(outcome).__name__,
            )
        return ConnectionSnapshot(platform=platform, connections=tuple(outcome))

    async def refresh(
        self,
        platforms: Iterable[Platform] | None = None,
        user_id: str | None = None,
    ) -> dict[Platform, ConnectionSnapshot]:
        """Re-fetch connection state for ``platforms`` (default: all available).

        Returns this call's snapshots. The held snapshot map is updated only
        for platforms no newer refresh has started on.
        """
        targets = list(dict.fromkeys(platforms)) if platforms is not None else available_platforms()
        self._token += 1
        token = self._token
        for platform in targets:
            self._started[platform] = token
        self._last_request = (tuple(targets), user_id)

        try:
            outcomes = await self.transport.lookup_many(targets, user_id)
        except Exception as exc:
            outcomes = dict.fromkeys(targets, exc)

        fresh = {
            platform: self._snapshot(platform, outcomes.get(platform, []))
            for platform in targets
        }

        current = dict(self._snapshots)
        applied = 0
        for platform, snap in fresh.items():
            if self._started.get(platform) == token:
                current[platform] = snap
                applied += 1
        if applied < len(fresh):
            logger.debug(
                "Refresh %d superseded for %d of %d platform(s)",
                token,
                len(fresh) - applied,
                len(fresh),
            )
        self._snapshots = MappingProxyType(current)
        return fresh

    async def refresh_again(
        self, user_id: str | None = None
    ) -> dict[Platform, ConnectionSnapshot]:
        """Repeat the most recent refresh, e.g. after a connect/disconnect.

        ``user_id`` overrides the one the last refresh used. With no earlier
        refresh, every available platform is looked up.
        """
        if self._last_request is None:
            return await self.refresh(None, user_id)
        platforms, last_user_id = self._last_request
        return await self.refresh(platforms, user_id or last_user_id)

    async def disconnect(self, connection_id: str) -> None:
        """Remove a connection on the remote service.

        Snapshots are left untouched; call :meth:`refresh_again` afterwards.
        Raises Unauthenticated, NotFound, RemoteError or NetworkError.
        """
        await self.transport.disconnect(connection_id)

    async def refresh_one(self, connection_id: str) -> Connection:
        """Refresh one connection's tokens.

        Raises Unauthenticated, Expired, RemoteError or NetworkError.
        """
        connection = await self.transport.refresh(connection_id)
        logger.info("Refreshed %s connection %s", connection.platform.value, connection_id)
        return connection

    async def details(self, connection_id: str) -> Connection:
        """Fetch one connection's details."""
        return await self.transport.details(connection_id)
