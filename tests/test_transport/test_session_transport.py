"""Tests for the session (cookie) connection transport."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from socialflood.exceptions import Expired, NotFound, Unauthenticated
from socialflood.platforms.base import Platform
from socialflood.transport.base import ConnectionTransport
from socialflood.transport.http import ApiClient
from socialflood.transport.session import SessionTransport


class TestLookup:
    async def test_filters_by_platform(
        self,
        make_api: Callable[..., ApiClient],
        make_connection: Callable[..., dict[str, Any]],
    ) -> None:
        listing = {
            "connections": [
                make_connection("twitter", "c1", account="tw-1"),
                make_connection("linkedin", "c2", account="li-1"),
            ]
        }
        transport = SessionTransport(make_api(lambda request: httpx.Response(200, json=listing)))

        twitter = await transport.lookup(Platform.TWITTER, None)
        assert [c.id for c in twitter] == ["c1"]
        assert twitter[0].platform_account_id == "tw-1"
        assert await transport.lookup(Platform.BLUESKY, None) == []

    async def test_lookup_many_reads_one_listing(
        self,
        make_api: Callable[..., ApiClient],
        make_connection: Callable[..., dict[str, Any]],
    ) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(200, json={"connections": [make_connection("twitter")]})

        transport = SessionTransport(make_api(handler))
        platforms = [Platform.TWITTER, Platform.LINKEDIN, Platform.BLUESKY]
        outcomes = await transport.lookup_many(platforms, None)
        assert calls == 1
        assert list(outcomes) == platforms
        assert [len(outcomes[p]) for p in platforms] == [1, 0, 0]  # type: ignore[arg-type]

        await transport.lookup_many(platforms, None)
        assert calls == 2

    async def test_unknown_platform_record_is_skipped(
        self,
        make_api: Callable[..., ApiClient],
        make_connection: Callable[..., dict[str, Any]],
    ) -> None:
        listing = {
            "connections": [
                make_connection("threads", "c0"),
                make_connection("twitter", "c1"),
                {"id": "c2", "platform": "linkedin"},
            ]
        }
        transport = SessionTransport(make_api(lambda request: httpx.Response(200, json=listing)))
        connections = await transport.list_connections()
        assert [c.id for c in connections] == ["c1"]

    async def test_unauthenticated_listing(self, make_api: Callable[..., ApiClient]) -> None:
        transport = SessionTransport(
            make_api(lambda request: httpx.Response(401, json={"error": "unauthorized"}))
        )
        with pytest.raises(Unauthenticated):
            await transport.lookup(Platform.TWITTER, None)


class TestConnectionOperations:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(SessionTransport(ApiClient("https://api.test")), ConnectionTransport)

    def test_connect_url(self, make_api: Callable[..., ApiClient], base_url: str) -> None:
        transport = SessionTransport(make_api(lambda request: httpx.Response(500)))
        assert transport.connect_url(Platform.LINKEDIN, None) == (
            f"{base_url}/api/connections/linkedin/connect"
        )

    async def test_disconnect(self, make_api: Callable[..., ApiClient]) -> None:
        seen: list[tuple[str, str]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, request.url.path))
            return httpx.Response(200, json={"success": True})

        await SessionTransport(make_api(handler)).disconnect("c1")
        assert seen == [("DELETE", "/api/connections/c1")]

    async def test_disconnect_unknown_id(self, make_api: Callable[..., ApiClient]) -> None:
        transport = SessionTransport(
            make_api(
                lambda request: httpx.Response(
                    404, json={"error": "not_found", "message": "Connection not found"}
                )
            )
        )
        with pytest.raises(NotFound, match="Connection not found"):
            await transport.disconnect("missing")

    async def test_refresh(
        self,
        make_api: Callable[..., ApiClient],
        make_connection: Callable[..., dict[str, Any]],
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert request.url.path == "/api/connections/c1/refresh"
            return httpx.Response(200, json=make_connection("twitter", "c1"))

        connection = await SessionTransport(make_api(handler)).refresh("c1")
        assert connection.id == "c1"
        assert connection.scopes == frozenset({"read", "write"})

    async def test_refresh_expired(self, make_api: Callable[..., ApiClient]) -> None:
        transport = SessionTransport(
            make_api(lambda request: httpx.Response(400, json={"error": "refresh_token_expired"}))
        )
        with pytest.raises(Expired):
            await transport.refresh("c1")

    async def test_details(
        self,
        make_api: Callable[..., ApiClient],
        make_connection: Callable[..., dict[str, Any]],
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/connections/details/c9"
            return httpx.Response(200, json=make_connection("bluesky", "c9", username="bob"))

        connection = await SessionTransport(make_api(handler)).details("c9")
        assert connection.platform == Platform.BLUESKY
        assert connection.label == "bob"
