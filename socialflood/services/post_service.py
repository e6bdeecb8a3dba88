"""Post package service: pure updates, per-platform validation, status derivation.

Every update returns a new ``PostPackage``; nothing is mutated in place.
Validation is deferred to publish time so a draft may exceed a platform's
limits while it is being written.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING

from socialflood.exceptions import ErrorKind
from socialflood.platforms.base import Platform
from socialflood.platforms.registry import available_platforms, content_length, descriptor
from socialflood.schemas.post import (
    PackageStatus,
    PostPackage,
    PostVariant,
    ValidationResult,
    VariantStatus,
)
from socialflood.services.datetime_service import now_utc

if TYPE_CHECKING:
    from datetime import datetime

    from socialflood.platforms.base import PlatformDescriptor


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _first_media_missing(variant: PostVariant) -> bool:
    return not variant.media or _blank(variant.media[0])


def _missing_text(variant: PostVariant) -> list[str]:
    return ["content"] if _blank(variant.content) else []


def _missing_pinterest(variant: PostVariant) -> list[str]:
    missing: list[str] = []
    if _blank(variant.options.get("board_id")):
        missing.append("board_id")
    if _first_media_missing(variant):
        missing.append("image")
    if _blank(variant.options.get("title")):
        missing.append("title")
    return missing


def _missing_instagram(variant: PostVariant) -> list[str]:
    return [] if any(not _blank(url) for url in variant.media) else ["media"]


def _missing_video(variant: PostVariant) -> list[str]:
    return ["video_url"] if _first_media_missing(variant) else []


REQUIRED_FIELDS: dict[Platform, Callable[[PostVariant], list[str]]] = {
    Platform.PINTEREST: _missing_pinterest,
    Platform.INSTAGRAM: _missing_instagram,
    Platform.TIKTOK: _missing_video,
    Platform.YOUTUBE: _missing_video,
    Platform.TWITTER: _missing_text,
    Platform.LINKEDIN: _missing_text,
    Platform.BLUESKY: _missing_text,
    Platform.FACEBOOK: _missing_text,
}


# -- Construction and pure updates -----------------------------------------


def create_package(
    platforms: Iterable[Platform] | None = None,
    *,
    package_id: str | None = None,
    created_at: datetime | None = None,
) -> PostPackage:
    """Start a new draft with an enabled, empty variant per platform.

    Defaults to every currently available platform.
    """
    targets = list(platforms) if platforms is not None else available_platforms()
    return PostPackage(
        id=package_id or uuid.uuid4().hex,
        created_at=created_at or now_utc(),
        status="draft",
        variants={p: PostVariant() for p in targets},
    )


def _update_variant(package: PostPackage, platform: Platform, **changes: object) -> PostPackage:
    if package.status == "posting":
        raise ValueError(f"Package {package.id} is being published and cannot be edited")
    current = package.variants.get(platform, PostVariant())
    if current.status == "success":
        msg = f"The {descriptor(platform).display_name} variant is already published"
        raise ValueError(msg)
    variants = dict(package.variants)
    variants[platform] = current.model_copy(update=changes)
    return package.model_copy(
        update={"variants": variants, "status": package_status(variants.values())}
    )


def set_content(package: PostPackage, platform: Platform, content: str) -> PostPackage:
    """Replace a variant's text. No validation is performed."""
    return _update_variant(package, platform, content=content)


def set_media(package: PostPackage, platform: Platform, media: Sequence[str]) -> PostPackage:
    """Replace a variant's ordered media references."""
    return _update_variant(package, platform, media=tuple(media))


def add_media(package: PostPackage, platform: Platform, url: str) -> PostPackage:
    """Append one media reference to a variant."""
    current = package.variants.get(platform, PostVariant())
    return set_media(package, platform, (*current.media, url))


def remove_media(package: PostPackage, platform: Platform, index: int) -> PostPackage:
    """Drop the media reference at ``index``."""
    media = list(package.variants.get(platform, PostVariant()).media)
    del media[index]
    return set_media(package, platform, media)


def set_option(
    package: PostPackage, platform: Platform, key: str, value: str | None
) -> PostPackage:
    """Set (or, with ``None``, clear) a platform-specific field such as ``board_id``."""
    options = dict(package.variants.get(platform, PostVariant()).options)
    if value is None:
        options.pop(key, None)
    else:
        options[key] = value
    return _update_variant(package, platform, options=options)


def toggle(package: PostPackage, platform: Platform, enabled: bool) -> PostPackage:
    """Enable or disable a platform for this package."""
    return _update_variant(package, platform, enabled=enabled)


# -- Validation ------------------------------------------------------------


def validate(
    variant: PostVariant,
    platform: Platform,
    desc: PlatformDescriptor | None = None,
) -> ValidationResult:
    """Check a variant against its platform's limits and required fields.

    Disabled variants are skipped and reported valid. Errors are reported in
    precedence order: content length, media count, required fields.
    """
    if not variant.enabled:
        return ValidationResult(is_valid=True)

    desc = desc or descriptor(platform)
    errors: list[ErrorKind] = []
    messages: list[str] = []

    length = content_length(platform, variant.content)
    if length > desc.max_content_length:
        errors.append(ErrorKind.CONTENT_TOO_LONG)
        messages.append(
            f"{desc.display_name} content is {length} characters; "
            f"the limit is {desc.max_content_length}"
        )

    if len(variant.media) > desc.max_media_items:
        errors.append(ErrorKind.TOO_MANY_MEDIA)
        messages.append(
            f"{desc.display_name} accepts at most {desc.max_media_items} media item(s); "
            f"got {len(variant.media)}"
        )

    missing = REQUIRED_FIELDS.get(platform, _missing_text)(variant)
    if missing:
        errors.append(ErrorKind.MISSING_REQUIRED_FIELD)
        messages.append(f"{desc.display_name} requires: {', '.join(missing)}")

    return ValidationResult(is_valid=not errors, errors=tuple(errors), messages=tuple(messages))


def validate_package(package: PostPackage) -> dict[Platform, ValidationResult]:
    """Validate every enabled variant of a package."""
    return {p: validate(v, p) for p, v in package.enabled_variants().items()}


# -- Status derivation -----------------------------------------------------


def derive_status(statuses: Iterable[VariantStatus | None]) -> PackageStatus:
    """Package status as a pure function of its enabled variants' statuses.

    Variants that were never submitted (no status) do not count.

    - no statuses set -> draft
    - any variant pending or posting -> posting
    - all success -> success; all failed -> failed; otherwise partial
    """
    values = [s for s in statuses if s is not None]
    if not values:
        return "draft"
    if any(s in ("pending", "posting") for s in values):
        return "posting"
    if all(s == "success" for s in values):
        return "success"
    if all(s == "failed" for s in values):
        return "failed"
    return "partial"


def package_status(variants: Iterable[PostVariant]) -> PackageStatus:
    """Derive a package's status from its variants, ignoring disabled ones."""
    return derive_status(v.status for v in variants if v.enabled)
