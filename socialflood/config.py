"""Client configuration loaded from environment variables."""

from __future__ import annotations

from typing import Literal
from urllib.parse import urlparse

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOCALHOST_HOSTS = {"localhost", "127.0.0.1", "::1"}


class Settings(BaseSettings):
    """SocialFlood client settings."""

    model_config = SettingsConfigDict(
        env_prefix="SOCIALFLOOD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    debug: bool = False

    # Remote API
    api_base_url: str = "http://localhost:3000"
    request_timeout: float = Field(default=15.0, gt=0)
    allow_insecure_http: bool = False

    # Connection transport: "session" uses the cookie-based /api/connections
    # endpoints, "legacy" the per-user /auth/{platform}/... endpoints.
    auth_mode: Literal["session", "legacy"] = "session"
    user_id: str | None = None
    session_cookie: str | None = None
    session_cookie_name: str = "better-auth.session_token"

    # OAuth popup flows
    pending_connect_ttl_seconds: int = Field(default=600, ge=1)

    def validated_base_url(self) -> str:
        """Return ``api_base_url`` after enforcing the transport security policy."""
        return validate_api_base_url(self.api_base_url, self.allow_insecure_http)


def validate_api_base_url(base_url: str, allow_insecure_http: bool = False) -> str:
    """Normalize the API base URL.

    The session cookie rides on every request, so plain ``http`` is only
    accepted for local development unless explicitly allowed.
    """
    normalized = base_url.strip().rstrip("/")
    parsed = urlparse(normalized)
    if parsed.scheme not in {"http", "https"} or not parsed.hostname:
        raise ValueError(f"Invalid API base URL {base_url!r}: expected http(s)://host[:port]")

    if parsed.scheme == "http" and parsed.hostname not in _LOCALHOST_HOSTS:
        if not allow_insecure_http:
            raise ValueError(
                f"Refusing plain-HTTP API base URL {normalized!r}: the session cookie "
                "would be sent unencrypted. Use https:// or --allow-insecure-http."
            )
    return normalized
