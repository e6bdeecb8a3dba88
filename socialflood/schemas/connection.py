"""Connection schemas for the remote connections API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from socialflood.platforms.base import Platform
from socialflood.services.datetime_service import now_utc, parse_datetime

LEGACY_ID_PREFIX = "legacy"


def _parse_timestamp(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, (str, datetime)):
        return parse_datetime(value)
    return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class Connection(_CamelModel):
    """One authorized link between the local user and a platform account."""

    id: str = Field(min_length=1)
    platform: Platform
    platform_account_id: str = Field(alias="platformUserId")
    platform_username: str | None = None
    display_name: str | None = None
    scopes: frozenset[str] = frozenset()
    expires_at: datetime
    refresh_expires_at: datetime | None = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime
    user_id: str | None = None

    @field_validator(
        "expires_at", "refresh_expires_at", "created_at", "updated_at", mode="before"
    )
    @classmethod
    def parse_timestamps(cls, value: Any) -> Any:
        return _parse_timestamp(value)

    def is_expired(self, now: datetime | None = None) -> bool:
        """Whether the access token has expired."""
        return self.expires_at <= (now or now_utc())

    @property
    def label(self) -> str:
        """Human-readable account name."""
        return self.platform_username or self.display_name or self.platform_account_id


class ConnectionsResponse(_CamelModel):
    """Body of ``GET /api/connections``.

    Records stay raw here and are validated one by one by the transport.
    """

    connections: list[dict[str, Any]]


class ApiErrorBody(_CamelModel):
    """Error body shape shared by every endpoint."""

    error: str = ""
    message: str = ""


class LegacyAccount(_CamelModel):
    """Account block of a legacy ``/auth/{platform}/status`` response."""

    id: str
    username: str | None = None
    display_name: str | None = None
    scopes: frozenset[str] = frozenset()
    expires_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("expires_at", "created_at", "updated_at", mode="before")
    @classmethod
    def parse_timestamps(cls, value: Any) -> Any:
        return _parse_timestamp(value)


class LegacyStatusResponse(_CamelModel):
    """Body of the legacy per-user ``GET /auth/{platform}/status?userId=``."""

    connected: bool
    user: LegacyAccount | None = None

    def to_connection(self, platform: Platform, user_id: str) -> Connection | None:
        """Convert to a Connection, or None if the platform is not connected."""
        if not self.connected or self.user is None:
            return None
        account = self.user
        now = now_utc()
        return Connection(
            id=legacy_connection_id(platform, user_id),
            platform=platform,
            platform_account_id=account.id,
            platform_username=account.username,
            display_name=account.display_name,
            scopes=account.scopes,
            expires_at=account.expires_at or now,
            is_active=True,
            created_at=account.created_at or now,
            updated_at=account.updated_at or now,
            user_id=user_id,
        )


class GlobalAccount(_CamelModel):
    """One externally-authenticated account of a globally-authenticated platform."""

    tiktok_user_id: str = Field(alias="tiktokUserId")
    tiktok_username: str | None = Field(default=None, alias="tiktokUsername")
    scopes: frozenset[str] = frozenset()
    expires_at: datetime
    is_expired: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("expires_at", "created_at", "updated_at", mode="before")
    @classmethod
    def parse_timestamps(cls, value: Any) -> Any:
        return _parse_timestamp(value)

    def to_connection(self, platform: Platform) -> Connection:
        created = self.created_at or self.expires_at
        return Connection(
            id=f"{platform.value}:{self.tiktok_user_id}",
            platform=platform,
            platform_account_id=self.tiktok_user_id,
            platform_username=self.tiktok_username,
            scopes=self.scopes,
            expires_at=self.expires_at,
            is_active=not self.is_expired,
            created_at=created,
            updated_at=self.updated_at or created,
        )


class GlobalAccountsResponse(_CamelModel):
    """Body of ``GET /api/auth/tiktok/users``."""

    users: list[GlobalAccount]


def legacy_connection_id(platform: Platform, user_id: str) -> str:
    """Synthesize a connection id for the legacy transport, which has none."""
    return f"{LEGACY_ID_PREFIX}:{platform.value}:{user_id}"


def split_legacy_connection_id(connection_id: str) -> tuple[Platform, str] | None:
    """Inverse of :func:`legacy_connection_id`; None if the id is not a legacy id."""
    prefix, sep, rest = connection_id.partition(":")
    if prefix != LEGACY_ID_PREFIX or not sep:
        return None
    platform_name, sep, user_id = rest.partition(":")
    if not sep or not user_id:
        return None
    try:
        return Platform(platform_name), user_id
    except ValueError:
        return None
