"""Session authentication schemas for the cookie-based auth service."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from socialflood.services.datetime_service import parse_datetime


class _AuthModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class SignInRequest(_AuthModel):
    """Email sign-in request."""

    email: EmailStr
    password: str = Field(min_length=1, max_length=200)


class SignUpRequest(_AuthModel):
    """Email sign-up request."""

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8, max_length=200)


class SessionUser(_AuthModel):
    """The signed-in user."""

    id: str
    name: str = ""
    email: str
    image: str | None = None
    email_verified: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def parse_timestamps(cls, value: Any) -> Any:
        if isinstance(value, str) and value:
            return parse_datetime(value)
        return value


class SessionRecord(_AuthModel):
    """Server-side session metadata."""

    id: str = ""
    user_id: str
    expires_at: datetime

    @field_validator("expires_at", mode="before")
    @classmethod
    def parse_expiry(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_datetime(value)
        return value


class SessionInfo(_AuthModel):
    """Body of ``GET /api/auth/get-session`` when a session exists."""

    user: SessionUser
    session: SessionRecord
