"""Credentialed HTTP client for the remote API with uniform error mapping."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from socialflood.exceptions import Expired, NetworkError, NotFound, RemoteError, Unauthenticated
from socialflood.schemas.connection import ApiErrorBody

if TYPE_CHECKING:
    from socialflood.config import Settings

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_EXPIRED_ERROR_CODES = {"token_expired", "refresh_token_expired", "expired"}


def _error_body(resp: httpx.Response) -> ApiErrorBody:
    try:
        return ApiErrorBody.model_validate(resp.json())
    except (ValueError, ValidationError):
        # Not JSON, or JSON of another shape
        return ApiErrorBody()


def raise_for_api_error(resp: httpx.Response, fallback_message: str) -> None:
    """Map a non-2xx response to the client's exception hierarchy.

    401 -> Unauthenticated, 404 -> NotFound, 410 or an expiry error code ->
    Expired, anything else -> RemoteError carrying the remote message when
    there is one.
    """
    if resp.is_success:
        return
    body = _error_body(resp)
    message = body.message or fallback_message
    if resp.status_code == 401:
        raise Unauthenticated(body.message or "Not authenticated")
    if resp.status_code == 404:
        raise NotFound(message)
    if resp.status_code == 410 or body.error.lower() in _EXPIRED_ERROR_CODES:
        raise Expired(message)
    raise RemoteError(message, status_code=resp.status_code)


class ApiClient:
    """Async client for the SocialFlood API.

    Every request carries the session cookie (the equivalent of a browser's
    ``credentials: 'include'``) and JSON content type.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 15.0,
        cookies: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
            cookies=cookies,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> ApiClient:
        """Build a client from settings, enforcing the base URL policy."""
        cookies = None
        if settings.session_cookie:
            cookies = {settings.session_cookie_name: settings.session_cookie}
        return cls(
            settings.validated_base_url(),
            timeout=settings.request_timeout,
            cookies=cookies,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    def url(self, path: str, params: dict[str, str] | None = None) -> str:
        """Absolute URL for a path, for browser navigation rather than fetch."""
        return str(httpx.URL(f"{self.base_url}{path}", params=params))

    async def request(
        self,
        method: str,
        path: str,
        *,
        fallback_message: str,
        json: Any = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request and map failures to client exceptions."""
        try:
            resp = await self.client.request(method, path, json=json, params=params)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise NetworkError(f"{fallback_message}: {exc}") from exc
        raise_for_api_error(resp, fallback_message)
        return resp

    async def request_model(
        self,
        method: str,
        path: str,
        model: type[ModelT],
        *,
        fallback_message: str,
        json: Any = None,
        params: dict[str, str] | None = None,
    ) -> ModelT:
        """Send a request and validate the JSON body against ``model``."""
        resp = await self.request(
            method, path, fallback_message=fallback_message, json=json, params=params
        )
        try:
            return model.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            logger.warning("Malformed %s body from %s %s: %s", model.__name__, method, path, exc)
            raise RemoteError(f"{fallback_message}: malformed response") from exc
