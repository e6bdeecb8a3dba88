"""Per-platform publish request payloads and the shared publish response.

Each request model carries a ``platform`` discriminant so the union can be
validated at the boundary; the discriminant itself travels in the URL path
(``POST /api/platforms/{platform}/posts``), not in the JSON body.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from socialflood.exceptions import ValidationFailed
from socialflood.platforms.base import Platform
from socialflood.schemas.post import PostVariant

logger = logging.getLogger(__name__)

YOUTUBE_TITLE_LIMIT = 100


class _Request(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_body(self) -> dict[str, Any]:
        """JSON body sent to the platform-posting endpoint."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"platform"})


class TwitterPostRequest(_Request):
    platform: Literal[Platform.TWITTER] = Platform.TWITTER
    text: str
    images: list[str] | None = None


class LinkedInPostRequest(_Request):
    platform: Literal[Platform.LINKEDIN] = Platform.LINKEDIN
    text: str
    article_url: str | None = None
    article_title: str | None = None


class BlueskyPostRequest(_Request):
    platform: Literal[Platform.BLUESKY] = Platform.BLUESKY
    text: str
    link_url: str | None = None
    link_title: str | None = None
    link_description: str | None = None


class TikTokPostRequest(_Request):
    platform: Literal[Platform.TIKTOK] = Platform.TIKTOK
    video_url: str = Field(min_length=1)
    caption: str | None = None
    privacy_level: Literal["PUBLIC", "FRIENDS", "PRIVATE"] = "PUBLIC"
    allow_comments: bool = True
    allow_duet: bool = True
    allow_stitch: bool = True


class PinterestPostRequest(_Request):
    platform: Literal[Platform.PINTEREST] = Platform.PINTEREST
    board_id: str = Field(min_length=1)
    image_url: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str | None = None
    link: str | None = None


class InstagramPostRequest(_Request):
    platform: Literal[Platform.INSTAGRAM] = Platform.INSTAGRAM
    user_id: str = Field(min_length=1)
    media_urls: list[str] = Field(min_length=1, max_length=10)
    caption: str | None = None
    location: str | None = None


class YouTubePostRequest(_Request):
    platform: Literal[Platform.YOUTUBE] = Platform.YOUTUBE
    video_url: str = Field(min_length=1)
    title: str = Field(min_length=1, max_length=YOUTUBE_TITLE_LIMIT)
    description: str | None = None
    privacy_status: Literal["public", "unlisted", "private"] = "public"


class FacebookPostRequest(_Request):
    platform: Literal[Platform.FACEBOOK] = Platform.FACEBOOK
    message: str
    media_urls: list[str] | None = None


PublishRequest = Annotated[
    TwitterPostRequest
    | LinkedInPostRequest
    | BlueskyPostRequest
    | TikTokPostRequest
    | PinterestPostRequest
    | InstagramPostRequest
    | YouTubePostRequest
    | FacebookPostRequest,
    Field(discriminator="platform"),
]


class PublishResponse(BaseModel):
    """Body returned by ``POST /api/platforms/{platform}/posts``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    success: bool
    post_id: str | None = None
    platform_post_id: str | None = None
    message: str = ""


def _flag(options: dict[str, str], key: str, default: bool = True) -> bool:
    value = options.get(key)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _media_or_none(media: tuple[str, ...]) -> list[str] | None:
    return list(media) if media else None


def _first_media(media: tuple[str, ...]) -> str:
    return media[0] if media else ""


def _first_line(text: str) -> str:
    stripped = text.strip()
    return stripped.splitlines()[0] if stripped else ""


def _twitter(variant: PostVariant, account_id: str | None) -> TwitterPostRequest:
    return TwitterPostRequest(text=variant.content, images=_media_or_none(variant.media))


def _drop_media(platform: Platform, variant: PostVariant) -> None:
    if variant.media:
        logger.warning(
            "%s posts carry text only; ignoring %d media item(s)",
            platform.value,
            len(variant.media),
        )


def _linkedin(variant: PostVariant, account_id: str | None) -> LinkedInPostRequest:
    _drop_media(Platform.LINKEDIN, variant)
    return LinkedInPostRequest(
        text=variant.content,
        article_url=variant.options.get("article_url"),
        article_title=variant.options.get("article_title"),
    )


def _bluesky(variant: PostVariant, account_id: str | None) -> BlueskyPostRequest:
    _drop_media(Platform.BLUESKY, variant)
    return BlueskyPostRequest(
        text=variant.content,
        link_url=variant.options.get("link_url"),
        link_title=variant.options.get("link_title"),
        link_description=variant.options.get("link_description"),
    )


def _tiktok(variant: PostVariant, account_id: str | None) -> TikTokPostRequest:
    opts = variant.options
    return TikTokPostRequest(
        video_url=_first_media(variant.media),
        caption=variant.content or None,
        privacy_level=opts.get("privacy_level", "PUBLIC").upper(),  # type: ignore[arg-type]
        allow_comments=_flag(opts, "allow_comments"),
        allow_duet=_flag(opts, "allow_duet"),
        allow_stitch=_flag(opts, "allow_stitch"),
    )


def _pinterest(variant: PostVariant, account_id: str | None) -> PinterestPostRequest:
    return PinterestPostRequest(
        board_id=variant.options.get("board_id", ""),
        image_url=_first_media(variant.media),
        title=variant.options.get("title", ""),
        description=variant.content or None,
        link=variant.options.get("link"),
    )


def _instagram(variant: PostVariant, account_id: str | None) -> InstagramPostRequest:
    return InstagramPostRequest(
        user_id=variant.options.get("user_id") or account_id or "",
        media_urls=list(variant.media),
        caption=variant.content or None,
        location=variant.options.get("location"),
    )


def _youtube(variant: PostVariant, account_id: str | None) -> YouTubePostRequest:
    title = variant.options.get("title") or _first_line(variant.content)
    return YouTubePostRequest(
        video_url=_first_media(variant.media),
        title=title[:YOUTUBE_TITLE_LIMIT],
        description=variant.content or None,
        privacy_status=variant.options.get(  # type: ignore[arg-type]
            "privacy_status", "public"
        ).lower(),
    )


def _facebook(variant: PostVariant, account_id: str | None) -> FacebookPostRequest:
    return FacebookPostRequest(message=variant.content, media_urls=_media_or_none(variant.media))


_BUILDERS: dict[Platform, Callable[[PostVariant, str | None], _Request]] = {
    Platform.TWITTER: _twitter,
    Platform.LINKEDIN: _linkedin,
    Platform.BLUESKY: _bluesky,
    Platform.TIKTOK: _tiktok,
    Platform.PINTEREST: _pinterest,
    Platform.INSTAGRAM: _instagram,
    Platform.YOUTUBE: _youtube,
    Platform.FACEBOOK: _facebook,
}


def build_request(
    platform: Platform,
    variant: PostVariant,
    account_id: str | None = None,
) -> PublishRequest:
    """Build the platform-specific request for a validated variant.

    ``account_id`` is the connected platform account, used where the remote
    endpoint needs it and the variant does not name one explicitly.

    Raises ValidationFailed if the variant cannot be expressed as a request.
    """
    builder = _BUILDERS.get(platform)
    if builder is None:
        msg = f"Unsupported platform: {platform!r}"
        raise ValidationFailed(msg)
    try:
        return builder(variant, account_id)  # type: ignore[return-value]
    except ValidationError as exc:
        msg = f"Invalid {platform.value} request: {exc.error_count()} field error(s)"
        raise ValidationFailed(msg) from exc
