"""Client for the external cookie-session authentication service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from socialflood.exceptions import Unauthenticated
from socialflood.schemas.auth import SessionInfo, SignInRequest, SignUpRequest

if TYPE_CHECKING:
    from socialflood.transport.http import ApiClient

logger = logging.getLogger(__name__)


class SessionAuthClient:
    """Login, logout and current-user calls.

    The session cookie set by sign-in is kept in the shared ``ApiClient``
    cookie jar, so every later connections/posting call is credentialed.
    """

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def sign_in(self, email: str, password: str) -> SessionInfo:
        """Sign in with email and password. Returns the new session."""
        request = SignInRequest(email=email, password=password)
        await self.api.request(
            "POST",
            "/api/auth/sign-in/email",
            json=request.model_dump(by_alias=True),
            fallback_message="Sign in failed",
        )
        session = await self.current_session()
        if session is None:
            raise Unauthenticated("Sign in did not establish a session")
        logger.info("Signed in as %s", session.user.email)
        return session

    async def sign_up(self, name: str, email: str, password: str) -> SessionInfo | None:
        """Create an account. Returns the session if the service signs the user in."""
        request = SignUpRequest(name=name, email=email, password=password)
        await self.api.request(
            "POST",
            "/api/auth/sign-up/email",
            json=request.model_dump(by_alias=True),
            fallback_message="Sign up failed",
        )
        return await self.current_session()

    async def sign_out(self) -> None:
        """End the current session."""
        await self.api.request("POST", "/api/auth/sign-out", fallback_message="Sign out failed")
        self.api.client.cookies.clear()

    async def current_session(self) -> SessionInfo | None:
        """Return the current session, or None when signed out."""
        try:
            resp = await self.api.request(
                "GET", "/api/auth/get-session", fallback_message="Failed to get session"
            )
        except Unauthenticated:
            return None
        if not resp.content:
            return None
        data = resp.json()
        if not data:
            return None
        return SessionInfo.model_validate(data)
