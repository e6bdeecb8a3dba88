"""Platform identifiers and descriptor data classes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Platform(StrEnum):
    """Social platforms a connection or post variant can target."""

    PINTEREST = "pinterest"
    INSTAGRAM = "instagram"
    TWITTER = "twitter"
    LINKEDIN = "linkedin"
    TIKTOK = "tiktok"
    YOUTUBE = "youtube"
    FACEBOOK = "facebook"
    BLUESKY = "bluesky"


@dataclass(frozen=True)
class PlatformDescriptor:
    """Static metadata for one platform."""

    display_name: str
    available: bool
    requires_user_id: bool
    max_content_length: int
    max_media_items: int
    description: str = ""
    # Bluesky limits user-perceived characters, not code points.
    counts_graphemes: bool = False
