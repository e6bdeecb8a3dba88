"""Transport strategy registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from socialflood.transport.legacy import LegacyTransport
from socialflood.transport.session import SessionTransport

if TYPE_CHECKING:
    from socialflood.transport.base import ConnectionTransport
    from socialflood.transport.http import ApiClient

TRANSPORTS: dict[str, type[SessionTransport] | type[LegacyTransport]] = {
    "session": SessionTransport,
    "legacy": LegacyTransport,
}


def get_transport(mode: str, api: ApiClient) -> ConnectionTransport:
    """Create the connection transport for an auth mode.

    Raises ValueError if the mode is unknown.
    """
    transport_cls = TRANSPORTS.get(mode)
    if transport_cls is None:
        msg = f"Unknown auth mode: {mode!r}. Available: {list(TRANSPORTS)}"
        raise ValueError(msg)
    return transport_cls(api)


def list_transports() -> list[str]:
    """Return the supported auth mode names."""
    return list(TRANSPORTS.keys())
