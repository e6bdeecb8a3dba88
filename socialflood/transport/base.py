"""Protocol for connection transport strategies."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from socialflood.platforms.base import Platform
    from socialflood.schemas.connection import Connection


@runtime_checkable
class ConnectionTransport(Protocol):
    """How connection state is read and changed on the remote service."""

    name: str

    async def lookup(self, platform: Platform, user_id: str | None) -> list[Connection]:
        """Return the platform's connections (empty when not connected)."""
        ...

    async def lookup_many(
        self, platforms: Sequence[Platform], user_id: str | None
    ) -> dict[Platform, list[Connection] | Exception]:
        """Look up every platform of one refresh.

        A platform whose lookup failed maps to the exception instead of its
        connections. Nothing is shared between separate calls.
        """
        ...

    def connect_url(self, platform: Platform, user_id: str | None) -> str:
        """URL that starts the platform's OAuth flow in a browser window."""
        ...

    async def disconnect(self, connection_id: str) -> None:
        """Remove a connection."""
        ...

    async def refresh(self, connection_id: str) -> Connection:
        """Refresh a connection's tokens and return the updated connection."""
        ...

    async def details(self, connection_id: str) -> Connection:
        """Fetch a single connection."""
        ...
