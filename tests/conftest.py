"""Shared test fixtures for SocialFlood."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from socialflood.config import Settings
from socialflood.transport.http import ApiClient

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

BASE_URL = "https://api.socialflood.test"

Handler = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def test_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    for key in (
        "SOCIALFLOOD_API_BASE_URL",
        "SOCIALFLOOD_AUTH_MODE",
        "SOCIALFLOOD_USER_ID",
        "SOCIALFLOOD_SESSION_COOKIE",
        "SOCIALFLOOD_DEBUG",
    ):
        monkeypatch.delenv(key, raising=False)
    return Settings(_env_file=None, api_base_url=BASE_URL, session_cookie="sess-123")


@pytest.fixture
async def make_api() -> AsyncGenerator[Callable[..., ApiClient], None]:
    """Factory for ApiClients whose requests are answered by ``handler``."""
    clients: list[ApiClient] = []

    def factory(handler: Handler, cookies: dict[str, str] | None = None) -> ApiClient:
        api = ApiClient(BASE_URL, cookies=cookies, transport=httpx.MockTransport(handler))
        clients.append(api)
        return api

    yield factory
    for api in clients:
        await api.aclose()


@pytest.fixture
def make_connection() -> Callable[..., dict[str, Any]]:
    """Factory for connection JSON as the connections API returns it."""

    def factory(
        platform: str,
        connection_id: str | None = None,
        *,
        account: str = "acct-1",
        username: str | None = "alice",
        active: bool = True,
        expires_at: str = "2099-01-01T00:00:00.000Z",
    ) -> dict[str, Any]:
        return {
            "id": connection_id or f"conn-{platform}",
            "userId": "user-1",
            "platform": platform,
            "platformUserId": account,
            "platformUsername": username,
            "displayName": None,
            "scopes": ["read", "write"],
            "expiresAt": expires_at,
            "refreshExpiresAt": None,
            "isActive": active,
            "createdAt": "2026-02-02T22:21:29.975Z",
            "updatedAt": "2026-02-03T08:00:00.000Z",
        }

    return factory
