"""Time-limited in-memory store for connect flows awaiting completion."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from socialflood.platforms.base import Platform


@dataclass(frozen=True)
class PendingConnect:
    """A connect popup that was opened but not yet seen to complete."""

    platform: Platform
    user_id: str | None
    url: str
    started_at: float


class PendingConnectStore:
    """Track pending connect flows, at most one per platform, with automatic expiry.

    A popup the user closes without finishing simply stays here until it
    expires; nothing else depends on it being removed.
    """

    def __init__(self, ttl_seconds: int = 600) -> None:
        self._ttl = ttl_seconds
        self._entries: dict[Platform, PendingConnect] = {}

    def set(self, platform: Platform, user_id: str | None, url: str) -> PendingConnect:
        """Record a connect flow, replacing any earlier one for the platform."""
        self.cleanup()
        self._entries.pop(platform, None)
        entry = PendingConnect(platform=platform, user_id=user_id, url=url, started_at=time.time())
        self._entries[platform] = entry
        return entry

    def pop(self, platform: Platform) -> PendingConnect | None:
        """Retrieve and remove the flow for a platform, if still live."""
        entry = self._entries.pop(platform, None)
        if entry is None or self._expired(entry, time.time()):
            return None
        return entry

    def pending(self) -> list[PendingConnect]:
        """Live entries, oldest first."""
        self.cleanup()
        return sorted(self._entries.values(), key=lambda e: e.started_at)

    def __contains__(self, platform: object) -> bool:
        entry = self._entries.get(platform)  # type: ignore[call-overload]
        return entry is not None and not self._expired(entry, time.time())

    def __len__(self) -> int:
        return len(self.pending())

    def cleanup(self) -> None:
        """Remove expired entries."""
        now = time.time()
        expired = [k for k, e in self._entries.items() if self._expired(e, now)]
        for k in expired:
            del self._entries[k]

    def _expired(self, entry: PendingConnect, now: float) -> bool:
        return now - entry.started_at > self._ttl
