"""Platform registry: one immutable descriptor per platform."""

from __future__ import annotations

from types import MappingProxyType

import grapheme

from socialflood.platforms.base import Platform, PlatformDescriptor

PLATFORMS: MappingProxyType[Platform, PlatformDescriptor] = MappingProxyType(
    {
        Platform.PINTEREST: PlatformDescriptor(
            display_name="Pinterest",
            available=True,
            requires_user_id=True,
            max_content_length=500,
            max_media_items=1,
            description="Share pins and boards",
        ),
        Platform.TIKTOK: PlatformDescriptor(
            display_name="TikTok",
            available=True,
            requires_user_id=False,
            max_content_length=2200,
            max_media_items=1,
            description="Share short-form videos",
        ),
        Platform.TWITTER: PlatformDescriptor(
            display_name="X (Twitter)",
            available=True,
            requires_user_id=True,
            max_content_length=280,
            max_media_items=4,
            description="Share tweets and threads",
        ),
        Platform.LINKEDIN: PlatformDescriptor(
            display_name="LinkedIn",
            available=True,
            requires_user_id=True,
            max_content_length=3000,
            max_media_items=9,
            description="Share professional content",
        ),
        Platform.INSTAGRAM: PlatformDescriptor(
            display_name="Instagram",
            available=True,
            requires_user_id=True,
            max_content_length=2200,
            max_media_items=10,
            description="Share photos and reels",
        ),
        Platform.YOUTUBE: PlatformDescriptor(
            display_name="YouTube",
            available=True,
            requires_user_id=True,
            max_content_length=5000,
            max_media_items=1,
            description="Upload videos to your channel",
        ),
        Platform.FACEBOOK: PlatformDescriptor(
            display_name="Facebook",
            available=False,
            requires_user_id=True,
            max_content_length=63206,
            max_media_items=10,
            description="Coming soon",
        ),
        Platform.BLUESKY: PlatformDescriptor(
            display_name="Bluesky",
            available=True,
            requires_user_id=True,
            max_content_length=300,
            max_media_items=4,
            description="Share on the decentralized social network",
            counts_graphemes=True,
        ),
    }
)


def descriptor(platform: Platform) -> PlatformDescriptor:
    """Return the descriptor for a platform. Every platform has one."""
    return PLATFORMS[platform]


def list_platforms() -> list[Platform]:
    """Return every platform in display order."""
    return list(PLATFORMS.keys())


def available_platforms() -> list[Platform]:
    """Return platforms that can be connected today."""
    return [p for p, d in PLATFORMS.items() if d.available]


def coming_soon_platforms() -> list[Platform]:
    """Return platforms that are listed but not yet connectable."""
    return [p for p, d in PLATFORMS.items() if not d.available]


def parse_platform(name: str) -> Platform:
    """Convert a user-supplied name to a Platform.

    Raises ValueError if the name is unknown.
    """
    try:
        return Platform(name.strip().lower())
    except ValueError:
        msg = f"Unknown platform: {name!r}. Available: {[p.value for p in PLATFORMS]}"
        raise ValueError(msg) from None


def content_length(platform: Platform, text: str) -> int:
    """Length of ``text`` as the platform counts it."""
    if PLATFORMS[platform].counts_graphemes:
        return grapheme.length(text)
    return len(text)
