"""Connect-flow coordination: open an OAuth popup, then reconcile.

The remote service runs the actual OAuth exchange in a browser window we
do not control, and there is no completion callback. Completion is
therefore observed indirectly: after the user returns, ``reconcile``
re-reads connection status for the platforms with pending flows.
"""

from __future__ import annotations

import logging
import webbrowser
from dataclasses import dataclass
from typing import TYPE_CHECKING

from socialflood.platforms.registry import descriptor

if TYPE_CHECKING:
    from collections.abc import Callable

    from socialflood.platforms.base import Platform
    from socialflood.services.connection_service import ConnectionStatusAggregator
    from socialflood.services.pending_connect_store import PendingConnectStore
    from socialflood.transport.base import ConnectionTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileResult:
    completed: tuple[Platform, ...] = ()
    still_pending: tuple[Platform, ...] = ()


class OAuthPopupCoordinator:
    """Starts connect flows and folds their results back into status."""

    def __init__(
        self,
        aggregator: ConnectionStatusAggregator,
        transport: ConnectionTransport,
        *,
        store: PendingConnectStore,
        opener: Callable[[str], object] = webbrowser.open_new,
    ) -> None:
        self.aggregator = aggregator
        self.transport = transport
        self.store = store
        self.opener = opener

    def begin_connect(self, platform: Platform, user_id: str | None = None) -> str:
        """Open the platform's authorization page and remember the flow.

        Returns the URL that was opened so callers can show it when no
        browser is available.
        """
        desc = descriptor(platform)
        if not desc.available:
            raise ValueError(f"{desc.display_name} is not available yet")
        if self.transport.name == "legacy" and desc.requires_user_id and not user_id:
            raise ValueError(f"A user id is required to connect {desc.display_name}")

        url = self.transport.connect_url(platform, user_id)
        if not self.opener(url):
            logger.warning("Could not open a browser window; visit %s to continue", url)
        self.store.set(platform, user_id, url)
        logger.info("Started %s connect flow", platform.value)
        return url

    async def reconcile(self, user_id: str | None = None) -> ReconcileResult:
        """Re-read status for pending flows and clear the ones that completed.

        With nothing pending, the aggregator's last refresh is repeated.
        Flows that were abandoned simply stay pending until they expire.
        """
        pending = self.store.pending()
        if not pending:
            await self.aggregator.refresh_again(user_id)
            return ReconcileResult()

        if user_id is None:
            user_id = next((e.user_id for e in pending if e.user_id), None)
        platforms = [entry.platform for entry in pending]
        fresh = await self.aggregator.refresh(platforms, user_id)

        completed: list[Platform] = []
        still_pending: list[Platform] = []
        for platform in platforms:
            snap = fresh.get(platform)
            if snap is not None and snap.is_connected:
                self.store.pop(platform)
                completed.append(platform)
                logger.info("%s connect flow completed", platform.value)
            else:
                still_pending.append(platform)
        return ReconcileResult(completed=tuple(completed), still_pending=tuple(still_pending))
