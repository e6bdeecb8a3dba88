"""Post package schemas: multi-platform drafts and their per-platform variants."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from socialflood.exceptions import ErrorKind
from socialflood.platforms.base import Platform

VariantStatus = Literal["pending", "posting", "success", "failed"]
PackageStatus = Literal["draft", "posting", "success", "partial", "failed"]


class PostVariant(BaseModel):
    """One platform-specific draft within a post package."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    content: str = ""
    media: tuple[str, ...] = ()
    options: dict[str, str] = Field(
        default_factory=dict,
        description="Platform-specific fields, e.g. Pinterest board_id or TikTok privacy_level",
    )
    status: VariantStatus | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    validation_errors: tuple[ErrorKind, ...] = ()
    post_id: str | None = None
    platform_post_id: str | None = None


class PostPackage(BaseModel):
    """Aggregate draft fanned out to several platforms at once."""

    model_config = ConfigDict(frozen=True)

    id: str
    created_at: datetime
    status: PackageStatus = "draft"
    variants: dict[Platform, PostVariant]

    def enabled_variants(self) -> dict[Platform, PostVariant]:
        """Variants that take part in validation and publish, in insertion order."""
        return {p: v for p, v in self.variants.items() if v.enabled}


class ValidationResult(BaseModel):
    """Outcome of validating one variant against its platform's rules."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    errors: tuple[ErrorKind, ...] = ()
    messages: tuple[str, ...] = ()


class PublishFailure(BaseModel):
    """A per-platform failure captured during publish fan-out."""

    model_config = ConfigDict(frozen=True)

    platform: Platform
    kind: ErrorKind
    message: str
